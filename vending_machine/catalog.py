"""
Denomination Catalog Module

Static reference data for the coins and bills the machine recognizes.
Denominations are never deleted while referenced; they are switched
active/inactive instead.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid

from .errors import (
    ConflictError, InactiveDenominationError, InvalidArgumentError,
    InvalidQuantityError, NotFoundError, VendingError
)
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger, log_action


class DenominationKind(Enum):
    """Physical form of a denomination"""
    COIN = "COIN"
    BILL = "BILL"


@dataclass
class Denomination(StorageRecord):
    """A recognized coin or bill value"""
    amount: int
    kind: DenominationKind
    active: bool = True
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount <= 0:
            raise InvalidArgumentError("Denomination amount must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Denomination':
        data = dict(data)
        data['kind'] = DenominationKind(data['kind'])
        if data.get('deleted_at'):
            data['deleted_at'] = datetime.fromisoformat(data['deleted_at'])
        return super().from_dict(data)

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "type": self.kind.value,
            "isActive": self.active,
        }


class DenominationCatalog:
    """Read access and admin toggles for denominations"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "denominations"
        self.logger = get_logger("vending.catalog")

    def create_denomination(self, amount: int, kind: DenominationKind, active: bool = True) -> Denomination:
        """Register a new denomination; amounts are unique"""
        if amount <= 0:
            raise InvalidArgumentError("Denomination amount must be positive")
        if self.storage.find(self.table_name, {"amount": amount}):
            raise ConflictError(f"Denomination {amount} already exists")

        now = datetime.now(timezone.utc)
        denomination = Denomination(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            amount=amount,
            kind=kind,
            active=active
        )
        self.storage.save(self.table_name, denomination.id, denomination.to_dict())

        log_action(
            self.logger, "info", f"Denomination created: {amount} {kind.value}",
            action="create_denomination", resource=f"denomination:{denomination.id}"
        )
        return denomination

    def get_denomination(self, denomination_id: str) -> Denomination:
        """Get denomination by ID, active or not"""
        data = self.storage.load(self.table_name, denomination_id)
        if not data or data.get('deleted_at'):
            raise NotFoundError(f"Denomination ID: {denomination_id} not found")
        return Denomination.from_dict(data)

    def list_all(self) -> List[Denomination]:
        """All non-deleted denominations, amount descending"""
        denominations = [
            Denomination.from_dict(data)
            for data in self.storage.load_all(self.table_name)
            if not data.get('deleted_at')
        ]
        denominations.sort(key=lambda d: d.amount, reverse=True)
        return denominations

    def list_active(self) -> List[Denomination]:
        """Active denominations ordered by amount descending"""
        self.logger.debug("list_active called")
        return [d for d in self.list_all() if d.active]

    def validate(self, denomination_id: str, qty: int) -> Denomination:
        """
        Check that a deposit of ``qty`` units of a denomination is acceptable.

        Raises:
            NotFoundError: Unknown denomination
            InactiveDenominationError: Denomination switched off
            InvalidQuantityError: qty <= 0
        """
        denomination = self.get_denomination(denomination_id)
        if not denomination.active:
            raise InactiveDenominationError(f"Denomination {denomination.amount} is not active")
        if qty <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")
        return denomination

    def validate_denomination(self, denomination_id: str, qty: int) -> Dict[str, Any]:
        """Non-raising form of validate() for the admin endpoint"""
        try:
            self.validate(denomination_id, qty)
        except VendingError as e:
            return {"valid": False, "message": e.message}
        return {"valid": True}

    def set_active(self, denomination_id: str, active: bool) -> Denomination:
        """Accept or stop accepting a denomination"""
        denomination = self.get_denomination(denomination_id)
        denomination.active = active
        denomination.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.table_name, denomination.id, denomination.to_dict())

        log_action(
            self.logger, "info",
            f"Denomination {denomination.amount} {'activated' if active else 'deactivated'}",
            action="set_denomination_active", resource=f"denomination:{denomination.id}"
        )
        return denomination
