"""
System wiring and request dependencies
"""

from typing import Optional

from fastapi import HTTPException

from ..storage import StorageInterface, create_storage
from ..catalog import DenominationCatalog
from ..coordinator import TransactionCoordinator
from ..cash import CashLedger
from ..products import ProductLedger
from ..orders import OrderProcessor
from ..errors import VendingError
from ..seed import seed_denominations
from ..config import VendingConfig, get_config
from ..logging_config import get_logger


logger = get_logger("vending.api")

STATUS_BY_KIND = {
    "NotFound": 404,
    "InvalidArgument": 400,
    "Conflict": 409,
    "Internal": 500,
}


class VendingSystem:
    """Vending machine with all components initialized over one storage"""

    def __init__(self, storage: Optional[StorageInterface] = None, config: Optional[VendingConfig] = None):
        self.config = config or get_config()

        # Initialize storage
        self.storage = storage if storage is not None else create_storage(self.config.database_url)

        # Initialize core components
        self.catalog = DenominationCatalog(self.storage)
        self.coordinator = TransactionCoordinator(self.storage)
        self.cash_ledger = CashLedger(self.storage, self.catalog, self.coordinator)
        self.product_ledger = ProductLedger(self.storage, self.coordinator)
        self.order_processor = OrderProcessor(
            self.storage, self.catalog, self.cash_ledger, self.product_ledger,
            self.coordinator, default_cancel_reason=self.config.default_cancel_reason
        )

        if self.config.seed_on_startup:
            seed_denominations(self.catalog, self.cash_ledger, self.config.default_cash_quantities)

    def close(self) -> None:
        self.storage.close()


# Global vending system instance, created on first request
vending_system: Optional[VendingSystem] = None


def get_vending_system() -> VendingSystem:
    global vending_system
    if vending_system is None:
        vending_system = VendingSystem()
        logger.info("Vending system initialized")
    return vending_system


def to_http_exception(error: VendingError) -> HTTPException:
    """Map a core error to an HTTP error response"""
    status_code = STATUS_BY_KIND.get(error.kind, 500)
    if status_code == 500:
        logger.error(f"Internal error: {error.message}")
    return HTTPException(status_code=status_code, detail=error.to_dict())
