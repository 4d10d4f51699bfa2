"""
Cash Ledger Module

Tracks the machine's float: quantity on hand per denomination. Quantities
change only through ``CashLedger.adjust``, which locks the row before
computing the new quantity and never persists a negative value.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .catalog import Denomination, DenominationCatalog
from .change import ChangeResult, StockLine, make_change
from .coordinator import TransactionCoordinator, TransactionScope
from .errors import InsufficientStockError, NotFoundError
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger, log_action


@dataclass
class CashStock(StorageRecord):
    """
    Units on hand for one denomination.
    Rows are keyed by denomination id, so ``id == denomination_id``.
    """
    denomination_id: str
    quantity: int = 0

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "denominationId": self.denomination_id,
            "quantity": self.quantity,
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class CashStockView:
    """Stock row joined with its denomination"""
    stock: CashStock
    denomination: Denomination

    def to_dict(self) -> Dict[str, Any]:
        result = self.stock.to_api_dict()
        result["denomination"] = self.denomination.to_api_dict()
        return result


class CashLedger:
    """Quantity-on-hand per denomination with atomic adjust and change queries"""

    def __init__(
        self,
        storage: StorageInterface,
        catalog: DenominationCatalog,
        coordinator: TransactionCoordinator
    ):
        self.storage = storage
        self.catalog = catalog
        self.coordinator = coordinator
        self.table_name = "cash_stock"
        self.logger = get_logger("vending.cash")

    def get_stock(self) -> List[CashStockView]:
        """Stock rows of active denominations, amount descending"""
        views = []
        for denomination in self.catalog.list_active():
            data = self.storage.load(self.table_name, denomination.id)
            if data:
                views.append(CashStockView(CashStock.from_dict(data), denomination))
        return views

    def get_quantity(self, denomination_id: str) -> int:
        """Units on hand for a denomination (0 if no row yet)"""
        data = self.storage.load(self.table_name, denomination_id)
        return data['quantity'] if data else 0

    def adjust(
        self,
        denomination_id: str,
        delta_qty: int,
        tx: Optional[TransactionScope] = None
    ) -> CashStock:
        """
        Add or remove units of a denomination.

        Args:
            denomination_id: Denomination to adjust
            delta_qty: Signed change in units
            tx: Enclosing scope; a new one is opened when omitted

        Returns:
            Updated CashStock row

        Raises:
            NotFoundError: Unknown denomination
            InsufficientStockError: Result would be negative
        """
        log_action(
            self.logger, "info", "Adjusting cash stock",
            action="adjust_cash_stock", resource=f"denomination:{denomination_id}",
            extra={"delta_qty": delta_qty, "joined": tx is not None}
        )

        with self.coordinator.atomic(tx) as scope:
            if not scope.load("denominations", denomination_id):
                raise NotFoundError(f"Denomination ID: {denomination_id} not found")

            now = datetime.now(timezone.utc)
            data = scope.load_for_update(self.table_name, denomination_id)
            if data:
                stock = CashStock.from_dict(data)
            else:
                stock = CashStock(
                    id=denomination_id,
                    created_at=now,
                    updated_at=now,
                    denomination_id=denomination_id,
                    quantity=0
                )

            new_quantity = stock.quantity + delta_qty
            if new_quantity < 0:
                raise InsufficientStockError(
                    f"Insufficient cash stock. Current: {stock.quantity}, Requested: {delta_qty}",
                    current=stock.quantity, delta=delta_qty
                )

            stock.quantity = new_quantity
            stock.updated_at = now
            scope.save(self.table_name, stock.id, stock.to_dict())

        return stock

    def calculate_change(self, amount_to_change: int) -> ChangeResult:
        """
        Greedy change breakdown against the current float.

        Only active denominations with units on hand are eligible. Nothing is
        mutated; callers apply the breakdown through ``adjust``.
        """
        self.logger.info(f"calculate_change called with amount_to_change: {amount_to_change}")
        lines = [
            StockLine(view.denomination.id, view.denomination.amount, view.stock.quantity)
            for view in self.get_stock()
            if view.stock.quantity > 0
        ]
        result = make_change(amount_to_change, lines)
        if not result.success:
            log_action(
                self.logger, "warning", f"Change not available: {result.message}",
                action="calculate_change",
                extra={"amount": amount_to_change, "shortfall": result.shortfall}
            )
        return result
