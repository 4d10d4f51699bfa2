"""
Product Ledger Module

Product catalogue and per-product stock counters. Stock changes only through
``ProductLedger.adjust``; removed products are soft-deleted (inactive with a
deletion timestamp) and excluded from default queries.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import uuid

from .coordinator import TransactionCoordinator, TransactionScope
from .errors import ConflictError, InsufficientStockError, InvalidArgumentError, NotFoundError
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger, log_action


@dataclass
class Product(StorageRecord):
    """Sellable item"""
    name: str
    price: int
    sku: str
    active: bool = True
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.price <= 0:
            raise InvalidArgumentError("Product price must be positive")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        data = dict(data)
        if data.get('deleted_at'):
            data['deleted_at'] = datetime.fromisoformat(data['deleted_at'])
        return super().from_dict(data)

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "sku": self.sku,
            "isActive": self.active,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class ProductStock(StorageRecord):
    """Units on hand for one product; keyed by product id"""
    product_id: str
    quantity: int = 0

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class ProductWithStock:
    product: Product
    stock: Optional[ProductStock]

    @property
    def quantity(self) -> int:
        return self.stock.quantity if self.stock else 0

    def to_dict(self) -> Dict[str, Any]:
        result = self.product.to_api_dict()
        result["productStock"] = self.stock.to_api_dict() if self.stock else None
        return result


class ProductLedger:
    """Product catalogue plus atomic stock adjustments"""

    def __init__(self, storage: StorageInterface, coordinator: TransactionCoordinator):
        self.storage = storage
        self.coordinator = coordinator
        self.products_table = "products"
        self.stock_table = "product_stock"
        self.logger = get_logger("vending.products")

    def create_product(self, name: str, price: int, sku: str) -> Product:
        """
        Create a product together with an empty stock row.

        Raises:
            ConflictError: SKU already used (including by removed products)
            InvalidArgumentError: Non-positive price
        """
        self.logger.info(f"create_product called with sku: {sku}")
        if price <= 0:
            raise InvalidArgumentError("Product price must be positive")

        with self.coordinator.atomic() as tx:
            if tx.find(self.products_table, {"sku": sku}):
                raise ConflictError(f"Product with SKU: {sku} already exists")

            now = datetime.now(timezone.utc)
            product = Product(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                name=name,
                price=price,
                sku=sku
            )
            tx.save(self.products_table, product.id, product.to_dict())

            stock = ProductStock(id=product.id, created_at=now, updated_at=now, product_id=product.id)
            tx.save(self.stock_table, stock.id, stock.to_dict())

        log_action(
            self.logger, "info", f"Product created: {name}",
            action="create_product", resource=f"product:{product.id}",
            extra={"sku": sku, "price": price}
        )
        return product

    def _load_product(self, product_id: str, tx: Optional[TransactionScope] = None) -> Product:
        data = tx.load(self.products_table, product_id) if tx else self.storage.load(self.products_table, product_id)
        if not data or data.get('deleted_at'):
            raise NotFoundError(f"Product with ID: {product_id} not found")
        return Product.from_dict(data)

    def get_product(self, product_id: str) -> Product:
        """Get product by ID (removed products are not found)"""
        return self._load_product(product_id)

    def get_stock(self, product_id: str) -> Optional[ProductStock]:
        data = self.storage.load(self.stock_table, product_id)
        return ProductStock.from_dict(data) if data else None

    def get_product_with_stock(self, product_id: str) -> ProductWithStock:
        product = self._load_product(product_id)
        return ProductWithStock(product, self.get_stock(product_id))

    def list_active_products(self) -> List[ProductWithStock]:
        """Active, non-removed products with their stock"""
        result = []
        for data in self.storage.find(self.products_table, {"active": True}):
            product = Product.from_dict(data)
            if product.is_deleted:
                continue
            result.append(ProductWithStock(product, self.get_stock(product.id)))
        return result

    def update_product(
        self,
        product_id: str,
        name: Optional[str] = None,
        price: Optional[int] = None,
        active: Optional[bool] = None
    ) -> Product:
        """Update catalogue fields of a product"""
        self.logger.info(f"update_product called with id: {product_id}")
        with self.coordinator.atomic() as tx:
            product = self._load_product(product_id, tx)
            if name is not None:
                product.name = name
            if price is not None:
                if price <= 0:
                    raise InvalidArgumentError("Product price must be positive")
                product.price = price
            if active is not None:
                product.active = active
            product.updated_at = datetime.now(timezone.utc)
            tx.save(self.products_table, product.id, product.to_dict())
        return product

    def remove_product(self, product_id: str) -> None:
        """Soft delete: deactivate and stamp deleted_at"""
        self.logger.info(f"remove_product called with id: {product_id}")
        with self.coordinator.atomic() as tx:
            product = self._load_product(product_id, tx)
            now = datetime.now(timezone.utc)
            product.active = False
            product.deleted_at = now
            product.updated_at = now
            tx.save(self.products_table, product.id, product.to_dict())

        log_action(
            self.logger, "info", f"Product removed: {product.name}",
            action="remove_product", resource=f"product:{product_id}"
        )

    def adjust(
        self,
        product_id: str,
        delta_qty: int,
        tx: Optional[TransactionScope] = None
    ) -> ProductStock:
        """
        Add or remove units of a product.

        Args:
            product_id: Product to adjust
            delta_qty: Signed change in units
            tx: Enclosing scope; a new one is opened when omitted

        Raises:
            NotFoundError: Unknown product or missing stock row
            InsufficientStockError: Result would be negative
        """
        log_action(
            self.logger, "info", "Adjusting product stock",
            action="adjust_product_stock", resource=f"product:{product_id}",
            extra={"delta_qty": delta_qty, "joined": tx is not None}
        )

        with self.coordinator.atomic(tx) as scope:
            self._load_product(product_id, scope)

            data = scope.load_for_update(self.stock_table, product_id)
            if not data:
                raise NotFoundError(f"Product stock for product ID: {product_id} not found")
            stock = ProductStock.from_dict(data)

            new_quantity = stock.quantity + delta_qty
            if new_quantity < 0:
                raise InsufficientStockError(
                    f"Insufficient stock. Current: {stock.quantity}, Requested: {delta_qty}",
                    current=stock.quantity, delta=delta_qty
                )

            stock.quantity = new_quantity
            stock.updated_at = datetime.now(timezone.utc)
            scope.save(self.stock_table, stock.id, stock.to_dict())

        return stock
