"""
Product catalogue and stock endpoints
"""

from fastapi import APIRouter, Depends, status

from .deps import VendingSystem, get_vending_system, to_http_exception
from .schemas import AdjustStockRequest, CreateProductRequest, UpdateProductRequest
from ..errors import VendingError


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: CreateProductRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Create a new product with empty stock"""
    try:
        product = system.product_ledger.create_product(request.name, request.price, request.sku)
        return system.product_ledger.get_product_with_stock(product.id).to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.get("")
async def list_products(system: VendingSystem = Depends(get_vending_system)):
    """List active products with stock"""
    return [item.to_dict() for item in system.product_ledger.list_active_products()]


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    system: VendingSystem = Depends(get_vending_system)
):
    """Get product by ID"""
    try:
        return system.product_ledger.get_product_with_stock(product_id).to_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.patch("/{product_id}")
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Update product name, price or availability"""
    try:
        product = system.product_ledger.update_product(
            product_id,
            name=request.name,
            price=request.price,
            active=request.is_active
        )
        return product.to_api_dict()
    except VendingError as e:
        raise to_http_exception(e)


@router.delete("/{product_id}")
async def remove_product(
    product_id: str,
    system: VendingSystem = Depends(get_vending_system)
):
    """Soft delete a product"""
    try:
        system.product_ledger.remove_product(product_id)
        return {"success": True, "productId": product_id}
    except VendingError as e:
        raise to_http_exception(e)


@router.patch("/{product_id}/stock")
async def adjust_product_stock(
    product_id: str,
    request: AdjustStockRequest,
    system: VendingSystem = Depends(get_vending_system)
):
    """Add or remove units of a product"""
    try:
        return system.product_ledger.adjust(product_id, request.delta_qty).to_api_dict()
    except VendingError as e:
        raise to_http_exception(e)
