"""
Order lifecycle endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, status

from .deps import VendingSystem, get_vending_system, to_http_exception
from .schemas import DepositRequest, SelectProductRequest, CancelOrderRequest
from ..errors import VendingError


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(system: VendingSystem = Depends(get_vending_system)):
    """Start a new order"""
    try:
        order = system.order_processor.create_order()
        return {"orderId": order.id}
    except VendingError as e:
        raise to_http_exception(e)


@router.get("")
async def list_orders(system: VendingSystem = Depends(get_vending_system)):
    """List all orders, newest first"""
    return [view.to_dict() for view in system.order_processor.list_orders()]


@router.post("/deposit")
async def deposit_money(
    request: DepositRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Insert money, creating the order when no orderId is given"""
    try:
        result = system.order_processor.deposit_money(
            denomination_id=request.denomination_id,
            qty=request.qty,
            order_id=request.order_id
        )
        return result.to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    system: VendingSystem = Depends(get_vending_system)
):
    """Get order with product, deposits and change"""
    try:
        return system.order_processor.get_order(order_id).to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.post("/{order_id}/select-product")
async def select_product(
    order_id: str,
    request: SelectProductRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Select the product to buy"""
    try:
        return system.order_processor.select_product(order_id, request.product_id).to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.post("/{order_id}/purchase")
async def purchase(
    order_id: str,
    system: VendingSystem = Depends(get_vending_system)
):
    """Complete the purchase and dispense change"""
    try:
        return system.order_processor.purchase(order_id).to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    request: Optional[CancelOrderRequest] = None,
    system: VendingSystem = Depends(get_vending_system)
):
    """Cancel the order and refund all deposits"""
    try:
        reason = request.reason if request else None
        return system.order_processor.cancel_order(order_id, reason).to_dict()
    except VendingError as e:
        raise to_http_exception(e)
