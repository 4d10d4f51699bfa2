"""
Error Taxonomy Module

Structured errors raised by the vending core. Every error carries a ``kind``
(NotFound, InvalidArgument, Conflict, Internal) so that callers and the HTTP
layer can react to it without parsing messages.
"""

from typing import Any, Dict


class VendingError(Exception):
    """Base class for all vending machine errors"""
    kind = "Internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {"kind": self.kind, "message": self.message}


class NotFoundError(VendingError):
    """Unknown id or entity"""
    kind = "NotFound"


class InvalidArgumentError(VendingError):
    """Bad value: non-positive quantity, missing selection, underpayment"""
    kind = "InvalidArgument"


class InactiveDenominationError(InvalidArgumentError):
    """Denomination exists but is not accepted by the machine"""


class InvalidQuantityError(InvalidArgumentError):
    """Quantity must be greater than zero"""


class ConflictError(VendingError):
    """State violates a precondition (order status, stock, change availability)"""
    kind = "Conflict"


class InsufficientStockError(ConflictError):
    """Adjustment would leave a stock counter negative"""

    def __init__(self, message: str, current: int, delta: int):
        super().__init__(message)
        self.current = current
        self.delta = delta


class InternalError(VendingError):
    """Unexpected persistence failure"""
    kind = "Internal"
