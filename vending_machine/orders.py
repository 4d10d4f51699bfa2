"""
Order Processing Module

Owns the order lifecycle of a vending session: deposit money, select a
product, then purchase or cancel. Every mutating operation runs inside one
transaction scope, so a failure at any step leaves orders, deposits, change
lines and both stock ledgers exactly as they were before the call.

Inserted money is recorded on the order but only enters the float (cash
stock) when a purchase completes. A cancelled order records a full refund as
change lines and never touches the float.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid

from .catalog import Denomination, DenominationCatalog
from .cash import CashLedger
from .change import ChangeBreakdown
from .coordinator import TransactionCoordinator, TransactionScope
from .errors import ConflictError, InvalidArgumentError, NotFoundError, VendingError
from .products import Product, ProductLedger
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger, log_action


class OrderStatus(Enum):
    """Order lifecycle states. FAILED is reserved and never assigned."""
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


@dataclass
class Order(StorageRecord):
    """A single customer's vending session"""
    status: OrderStatus = OrderStatus.IN_PROGRESS
    product_id: Optional[str] = None
    paid_amount: int = 0
    credit_amount: int = 0  # paid_amount - selected price; negative until fully paid
    change_amount: int = 0
    remark: Optional[str] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status == OrderStatus.IN_PROGRESS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        data = dict(data)
        data['status'] = OrderStatus(data['status'])
        return super().from_dict(data)


@dataclass
class Deposit(StorageRecord):
    """Money physically inserted; append-only"""
    order_id: str
    denomination_id: str
    quantity: int
    sequence: int = 0


@dataclass
class ChangeLine(StorageRecord):
    """Money returned to the customer, as change or refund; append-only"""
    order_id: str
    denomination_id: str
    quantity: int
    sequence: int = 0


def _denomination_dict(denomination: Optional[Denomination]) -> Optional[Dict[str, Any]]:
    return denomination.to_api_dict() if denomination else None


@dataclass
class OrderView:
    """Read projection of an order with its product, deposits and change"""
    order: Order
    product: Optional[Product]
    deposits: List[Deposit] = field(default_factory=list)
    change: List[ChangeLine] = field(default_factory=list)
    denominations: Dict[str, Denomination] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        order = self.order
        return {
            "id": order.id,
            "status": order.status.value,
            "productId": order.product_id,
            "product": self.product.to_api_dict() if self.product else None,
            "paidAmount": order.paid_amount,
            "creditAmount": order.credit_amount,
            "changeAmount": order.change_amount,
            "remark": order.remark,
            "deposits": [
                {
                    "id": d.id,
                    "quantity": d.quantity,
                    "denomination": _denomination_dict(self.denominations.get(d.denomination_id)),
                }
                for d in self.deposits
            ],
            "change": [
                {
                    "id": c.id,
                    "quantity": c.quantity,
                    "denomination": _denomination_dict(self.denominations.get(c.denomination_id)),
                }
                for c in self.change
            ],
            "createdAt": order.created_at.isoformat(),
            "updatedAt": order.updated_at.isoformat(),
        }


@dataclass
class DepositResult:
    success: bool
    order_id: str
    deposit_amount: int
    total_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "orderId": self.order_id,
            "depositAmount": self.deposit_amount,
            "totalAmount": self.total_amount,
        }


@dataclass
class SelectProductResult:
    success: bool
    order_id: str
    product_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "orderId": self.order_id, "productId": self.product_id}


@dataclass
class PurchaseResult:
    success: bool
    order_id: str
    change_amount: int
    change: List[ChangeBreakdown] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "orderId": self.order_id,
            "changeAmount": self.change_amount,
            "change": [{"amount": c.amount, "quantity": c.quantity} for c in self.change],
        }


@dataclass
class CancelResult:
    success: bool
    order_id: str
    refund_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "orderId": self.order_id, "refundAmount": self.refund_amount}


class OrderProcessor:
    """
    Order state machine: IN_PROGRESS -> SUCCESS | CANCELLED.
    Terminal orders reject every further action with ConflictError.
    """

    def __init__(
        self,
        storage: StorageInterface,
        catalog: DenominationCatalog,
        cash_ledger: CashLedger,
        product_ledger: ProductLedger,
        coordinator: TransactionCoordinator,
        default_cancel_reason: str = "Cancelled by customer"
    ):
        self.storage = storage
        self.catalog = catalog
        self.cash_ledger = cash_ledger
        self.product_ledger = product_ledger
        self.coordinator = coordinator
        self.default_cancel_reason = default_cancel_reason
        self.orders_table = "orders"
        self.deposits_table = "order_deposits"
        self.changes_table = "order_changes"
        self.logger = get_logger("vending.orders")

    # Internal helpers

    def _new_order(self, tx: TransactionScope) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(id=str(uuid.uuid4()), created_at=now, updated_at=now)
        tx.save(self.orders_table, order.id, order.to_dict())
        return order

    def _load_order(self, tx: TransactionScope, order_id: str) -> Order:
        data = tx.load_for_update(self.orders_table, order_id)
        if not data:
            raise NotFoundError(f"Order with ID: {order_id} not found")
        return Order.from_dict(data)

    def _save_order(self, tx: TransactionScope, order: Order) -> None:
        order.updated_at = datetime.now(timezone.utc)
        tx.save(self.orders_table, order.id, order.to_dict())

    @staticmethod
    def _require_in_progress(order: Order, action: str) -> None:
        if not order.is_in_progress:
            raise ConflictError(
                f"Order {order.id} cannot {action} (status: {order.status.value})"
            )

    def _deposits_for(self, order_id: str) -> List[Deposit]:
        deposits = [Deposit.from_dict(d) for d in self.storage.find(self.deposits_table, {"order_id": order_id})]
        deposits.sort(key=lambda d: d.sequence)
        return deposits

    def _change_for(self, order_id: str) -> List[ChangeLine]:
        lines = [ChangeLine.from_dict(c) for c in self.storage.find(self.changes_table, {"order_id": order_id})]
        lines.sort(key=lambda c: c.sequence)
        return lines

    def _append_change_line(
        self, tx: TransactionScope, order_id: str, denomination_id: str, quantity: int, sequence: int
    ) -> ChangeLine:
        now = datetime.now(timezone.utc)
        line = ChangeLine(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            order_id=order_id,
            denomination_id=denomination_id,
            quantity=quantity,
            sequence=sequence
        )
        tx.save(self.changes_table, line.id, line.to_dict())
        return line

    def _selected_price(self, order: Order) -> int:
        if not order.product_id:
            return 0
        return self.product_ledger.get_product(order.product_id).price

    # Operations

    def create_order(self) -> Order:
        """Start a new IN_PROGRESS order with all amounts zero"""
        with self.coordinator.atomic() as tx:
            order = self._new_order(tx)

        log_action(
            self.logger, "info", "Order created",
            action="create_order", resource=f"order:{order.id}"
        )
        return order

    def deposit_money(
        self,
        denomination_id: str,
        qty: int,
        order_id: Optional[str] = None
    ) -> DepositResult:
        """
        Record money inserted by the customer.

        Creates a new order first when ``order_id`` is not given. The money is
        held on the order and does not enter the float until purchase.

        Raises:
            NotFoundError: Unknown order or denomination
            ConflictError: Order not IN_PROGRESS
            InvalidArgumentError: Inactive denomination or qty <= 0
        """
        self.logger.info(
            f"deposit_money called with order_id: {order_id or 'NEW'}, "
            f"denomination_id: {denomination_id}, qty: {qty}"
        )

        with self.coordinator.atomic() as tx:
            if order_id:
                order = self._load_order(tx, order_id)
            else:
                order = self._new_order(tx)

            self._require_in_progress(order, "accept deposits")
            denomination = self.catalog.validate(denomination_id, qty)

            now = datetime.now(timezone.utc)
            deposit = Deposit(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                order_id=order.id,
                denomination_id=denomination.id,
                quantity=qty,
                sequence=len(tx.find(self.deposits_table, {"order_id": order.id}))
            )
            tx.save(self.deposits_table, deposit.id, deposit.to_dict())

            deposit_amount = denomination.amount * qty
            order.paid_amount += deposit_amount
            order.credit_amount = order.paid_amount - self._selected_price(order)
            self._save_order(tx, order)

        log_action(
            self.logger, "info", f"Deposit recorded: {deposit_amount}",
            action="deposit_money", resource=f"order:{order.id}",
            extra={"denomination": denomination.amount, "qty": qty, "paid_amount": order.paid_amount}
        )
        return DepositResult(
            success=True,
            order_id=order.id,
            deposit_amount=deposit_amount,
            total_amount=order.paid_amount
        )

    def select_product(self, order_id: str, product_id: str) -> SelectProductResult:
        """
        Attach a product to the order and recompute credit. Stock is checked,
        not reserved.

        Raises:
            NotFoundError: Unknown order or product
            ConflictError: Order not IN_PROGRESS, or product out of stock
            InvalidArgumentError: Product inactive
        """
        self.logger.info(f"select_product called with order_id: {order_id}, product_id: {product_id}")

        with self.coordinator.atomic() as tx:
            order = self._load_order(tx, order_id)
            self._require_in_progress(order, "select a product")

            item = self.product_ledger.get_product_with_stock(product_id)
            if not item.product.active:
                raise InvalidArgumentError(f"Product {item.product.name} is not active")
            if item.quantity <= 0:
                raise ConflictError(f"Product {item.product.name} is out of stock")

            order.product_id = item.product.id
            order.credit_amount = order.paid_amount - item.product.price
            self._save_order(tx, order)

        log_action(
            self.logger, "info", f"Product selected: {item.product.name}",
            action="select_product", resource=f"order:{order_id}",
            extra={"product_id": product_id, "credit_amount": order.credit_amount}
        )
        return SelectProductResult(success=True, order_id=order_id, product_id=product_id)

    def purchase(self, order_id: str) -> PurchaseResult:
        """
        Complete the sale in one transaction.

        Steps: validate order and payment, compute greedy change against the
        current float, take one unit of product stock, move the deposited
        money into the float, pay out the change (recording change lines),
        and mark the order SUCCESS. Any failure rolls back every step.

        Raises:
            NotFoundError: Unknown order or product
            ConflictError: Order not IN_PROGRESS, change not available, or
                product stock exhausted
            InvalidArgumentError: No product selected or underpayment
        """
        self.logger.info(f"purchase called with order_id: {order_id}")

        try:
            with self.coordinator.atomic() as tx:
                order = self._load_order(tx, order_id)
                self._require_in_progress(order, "be purchased")
                if not order.product_id:
                    raise InvalidArgumentError("Cannot purchase without selecting a product")

                product = self.product_ledger.get_product(order.product_id)
                if order.paid_amount < product.price:
                    raise InvalidArgumentError(
                        f"Insufficient payment. Required: {product.price}, Paid: {order.paid_amount}"
                    )

                change_needed = order.paid_amount - product.price
                breakdown: List[ChangeBreakdown] = []
                if change_needed > 0:
                    change_result = self.cash_ledger.calculate_change(change_needed)
                    if not change_result.success:
                        raise ConflictError(f"Cannot make exact change: {change_result.message}")
                    breakdown = change_result.breakdown

                self.product_ledger.adjust(product.id, -1, tx)

                # Customer's money enters the float only now
                for deposit in self._deposits_for(order.id):
                    self.cash_ledger.adjust(deposit.denomination_id, deposit.quantity, tx)

                for sequence, line in enumerate(breakdown):
                    self.cash_ledger.adjust(line.denomination_id, -line.quantity, tx)
                    self._append_change_line(tx, order.id, line.denomination_id, line.quantity, sequence)

                order.status = OrderStatus.SUCCESS
                order.change_amount = change_needed
                order.credit_amount = 0
                self._save_order(tx, order)
        except VendingError as e:
            log_action(
                self.logger, "error", f"Purchase failed for order {order_id}: {e.message}",
                action="purchase", resource=f"order:{order_id}", extra={"kind": e.kind}
            )
            raise
        except Exception:
            log_action(
                self.logger, "error", f"Purchase failed for order {order_id}",
                action="purchase", resource=f"order:{order_id}", exc_info=True
            )
            raise

        log_action(
            self.logger, "info", f"Order {order_id} completed successfully. Change: {change_needed}",
            action="purchase", resource=f"order:{order_id}",
            extra={"product_id": product.id, "change": [line.to_dict() for line in breakdown]}
        )
        return PurchaseResult(
            success=True,
            order_id=order_id,
            change_amount=change_needed,
            change=breakdown
        )

    def cancel_order(self, order_id: str, reason: Optional[str] = None) -> CancelResult:
        """
        Cancel the order and refund everything deposited.

        The refund is recorded as change lines mirroring each deposit. The
        float is untouched because deposited money never entered it.

        Raises:
            NotFoundError: Unknown order
            ConflictError: Order not IN_PROGRESS
        """
        self.logger.info(f"cancel_order called with order_id: {order_id}")

        with self.coordinator.atomic() as tx:
            order = self._load_order(tx, order_id)
            self._require_in_progress(order, "be cancelled")

            for sequence, deposit in enumerate(self._deposits_for(order.id)):
                self._append_change_line(tx, order.id, deposit.denomination_id, deposit.quantity, sequence)

            order.status = OrderStatus.CANCELLED
            order.change_amount = order.paid_amount
            order.remark = reason or self.default_cancel_reason
            self._save_order(tx, order)

        log_action(
            self.logger, "info", f"Order {order_id} cancelled, refunded {order.paid_amount}",
            action="cancel_order", resource=f"order:{order_id}", extra={"reason": order.remark}
        )
        return CancelResult(success=True, order_id=order_id, refund_amount=order.paid_amount)

    # Read projections

    def _build_view(self, order: Order) -> OrderView:
        product = None
        if order.product_id:
            # Removed products still show on historical orders
            data = self.storage.load(self.product_ledger.products_table, order.product_id)
            product = Product.from_dict(data) if data else None

        deposits = self._deposits_for(order.id)
        change = self._change_for(order.id)

        denominations = {}
        for denomination_id in {line.denomination_id for line in [*deposits, *change]}:
            data = self.storage.load(self.catalog.table_name, denomination_id)
            if data:
                denominations[denomination_id] = Denomination.from_dict(data)

        return OrderView(order, product, deposits, change, denominations)

    def get_order(self, order_id: str) -> OrderView:
        """Order with product, deposits and change; read-only"""
        data = self.storage.load(self.orders_table, order_id)
        if not data:
            raise NotFoundError(f"Order with ID: {order_id} not found")
        return self._build_view(Order.from_dict(data))

    def list_orders(self) -> List[OrderView]:
        """All orders, newest first; read-only"""
        orders = [Order.from_dict(data) for data in self.storage.load_all(self.orders_table)]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [self._build_view(order) for order in orders]
