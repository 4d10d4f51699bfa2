"""
Seed Data Module

Reference denominations with an initial float, and a small demo product
range. Both seeders are idempotent: they skip work that already exists.
"""

from typing import Any, Dict, Optional

from .catalog import DenominationCatalog, DenominationKind
from .cash import CashLedger
from .products import ProductLedger
from .logging_config import get_logger


logger = get_logger("vending.seed")

# Coins 1, 5, 10; bills from 20 up
DEFAULT_DENOMINATIONS = [
    (1, DenominationKind.COIN),
    (5, DenominationKind.COIN),
    (10, DenominationKind.COIN),
    (20, DenominationKind.BILL),
    (50, DenominationKind.BILL),
    (100, DenominationKind.BILL),
    (500, DenominationKind.BILL),
    (1000, DenominationKind.BILL),
]

DEMO_PRODUCTS = [
    ("Coca Cola", 20, "COKE-001"),
    ("Pepsi", 20, "PEPSI-001"),
    ("Water", 10, "WATER-001"),
    ("Green Tea", 25, "TEA-001"),
    ("Lays Chips", 15, "CHIPS-001"),
    ("Snickers", 30, "SNICK-001"),
    ("KitKat", 25, "KITKAT-001"),
]


def seed_denominations(
    catalog: DenominationCatalog,
    cash_ledger: CashLedger,
    quantities: Optional[Dict[int, int]] = None
) -> int:
    """
    Create the default denominations and load the float.

    Args:
        catalog: Denomination catalog
        cash_ledger: Cash ledger to load
        quantities: Units per denomination amount; missing amounts start at 0

    Returns:
        Number of denominations created
    """
    existing = {d.amount for d in catalog.list_all()}
    quantities = quantities or {}
    created = 0

    for amount, kind in DEFAULT_DENOMINATIONS:
        if amount in existing:
            continue
        denomination = catalog.create_denomination(amount, kind)
        cash_ledger.adjust(denomination.id, quantities.get(amount, 0))
        created += 1

    if created:
        logger.info(f"Seeded {created} denominations")
    return created


def seed_demo_products(product_ledger: ProductLedger, quantity: int = 20) -> Dict[str, Any]:
    """Create the demo product range with ``quantity`` units each"""
    if product_ledger.storage.count(product_ledger.products_table) > 0:
        logger.warning("Products already exist. Skipping seed.")
        return {
            "message": "Demo products already exist. Skipping seed.",
            "productsCreated": 0,
            "productStockCreated": 0,
        }

    created = 0
    for name, price, sku in DEMO_PRODUCTS:
        product = product_ledger.create_product(name, price, sku)
        product_ledger.adjust(product.id, quantity)
        created += 1

    logger.info(f"Created {created} products")
    return {
        "message": "Demo products seeded successfully",
        "productsCreated": created,
        "productStockCreated": created,
    }
