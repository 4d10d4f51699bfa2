"""
Seed data endpoints
"""

from fastapi import APIRouter, Depends

from .deps import VendingSystem, get_vending_system, to_http_exception
from ..errors import VendingError
from ..seed import seed_demo_products


router = APIRouter()


@router.post("/demo-products")
async def seed_products(system: VendingSystem = Depends(get_vending_system)):
    """Create the demo product range (skipped when products exist)"""
    try:
        return seed_demo_products(system.product_ledger, system.config.demo_product_quantity)
    except VendingError as e:
        raise to_http_exception(e)
