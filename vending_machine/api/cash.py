"""
Cash float and denomination endpoints
"""

from fastapi import APIRouter, Depends

from .deps import VendingSystem, get_vending_system, to_http_exception
from .schemas import AdjustStockRequest, CalculateChangeRequest, ValidateDenominationRequest
from ..errors import VendingError


router = APIRouter()


@router.get("/denominations")
async def list_denominations(system: VendingSystem = Depends(get_vending_system)):
    """Active denominations, amount descending"""
    return [d.to_api_dict() for d in system.catalog.list_active()]


@router.post("/denominations/validate")
async def validate_denomination(
    request: ValidateDenominationRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Check whether a deposit would be accepted"""
    return system.catalog.validate_denomination(request.denomination_id, request.qty)


@router.get("/stock")
async def get_cash_stock(system: VendingSystem = Depends(get_vending_system)):
    """Float per active denomination"""
    return [view.to_dict() for view in system.cash_ledger.get_stock()]


@router.patch("/stock/{denomination_id}")
async def adjust_cash_stock(
    denomination_id: str,
    request: AdjustStockRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Add or remove units of a denomination"""
    try:
        return system.cash_ledger.adjust(denomination_id, request.delta_qty).to_api_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.post("/calculate-change")
async def calculate_change(
    request: CalculateChangeRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Greedy change breakdown against the current float; nothing is dispensed"""
    try:
        return system.cash_ledger.calculate_change(request.amount_to_change).to_dict()
    except VendingError as e:
        raise to_http_exception(e)
