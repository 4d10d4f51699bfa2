"""
Change-Making Module

Greedy change breakdown over the machine's float. The greedy rule is exact
for canonical coin systems (1, 5, 10, 20, 50, 100, ...) but is not complete
for arbitrary stock-constrained sets: it can report a shortfall even when
some other combination would have covered the amount. No exact fallback is
attempted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from .errors import InvalidArgumentError


NO_CASH_MESSAGE = "No cash available in machine"


class StockLine(NamedTuple):
    """One eligible float row: denomination id, face amount, units on hand"""
    denomination_id: str
    amount: int
    quantity: int


@dataclass
class ChangeBreakdown:
    """Units of one denomination handed back"""
    denomination_id: str
    amount: int
    quantity: int

    @property
    def total(self) -> int:
        return self.amount * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "denominationId": self.denomination_id,
            "amount": self.amount,
            "qty": self.quantity,
        }


@dataclass
class ChangeResult:
    """Outcome of a change calculation"""
    success: bool
    total_amount: int
    breakdown: List[ChangeBreakdown] = field(default_factory=list)
    message: Optional[str] = None
    shortfall: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "totalAmount": self.total_amount,
            "breakdown": [line.to_dict() for line in self.breakdown],
        }
        if self.message is not None:
            result["message"] = self.message
        if self.shortfall:
            result["shortfall"] = self.shortfall
        return result


def make_change(amount: int, stock: Iterable[StockLine]) -> ChangeResult:
    """
    Break ``amount`` into denominations using the largest that fit first.

    Args:
        amount: Amount owed back, in minor units
        stock: Eligible float rows; rows with no units are ignored

    Returns:
        ChangeResult. On shortfall ``breakdown`` is empty, ``total_amount`` is
        what could have been covered and ``shortfall`` what is missing.

    Raises:
        InvalidArgumentError: If amount is not positive
    """
    if amount <= 0:
        raise InvalidArgumentError("Amount to change must be greater than 0")

    lines = sorted(
        (line for line in stock if line.quantity > 0),
        key=lambda line: line.amount,
        reverse=True
    )
    if not lines:
        return ChangeResult(success=False, total_amount=0, message=NO_CASH_MESSAGE, shortfall=amount)

    remaining = amount
    breakdown: List[ChangeBreakdown] = []
    for line in lines:
        if remaining <= 0:
            break
        qty = min(remaining // line.amount, line.quantity)
        if qty > 0:
            breakdown.append(ChangeBreakdown(line.denomination_id, line.amount, qty))
            remaining -= qty * line.amount

    if remaining > 0:
        return ChangeResult(
            success=False,
            total_amount=amount - remaining,
            message=f"Cannot make exact change. Short by {remaining}",
            shortfall=remaining
        )

    return ChangeResult(success=True, total_amount=amount, breakdown=breakdown)
