"""
Tests for seed data
"""

from vending_machine.storage import InMemoryStorage
from vending_machine.catalog import DenominationCatalog, DenominationKind
from vending_machine.coordinator import TransactionCoordinator
from vending_machine.cash import CashLedger
from vending_machine.products import ProductLedger
from vending_machine.seed import (
    DEFAULT_DENOMINATIONS, DEMO_PRODUCTS, seed_denominations, seed_demo_products
)


class TestSeed:
    """Test idempotent seeding"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.catalog = DenominationCatalog(self.storage)
        self.coordinator = TransactionCoordinator(self.storage)
        self.cash_ledger = CashLedger(self.storage, self.catalog, self.coordinator)
        self.product_ledger = ProductLedger(self.storage, self.coordinator)

    def test_seed_denominations(self):
        created = seed_denominations(self.catalog, self.cash_ledger, {1: 100, 1000: 2})

        assert created == len(DEFAULT_DENOMINATIONS)
        by_amount = {d.amount: d for d in self.catalog.list_active()}
        assert by_amount[1].kind == DenominationKind.COIN
        assert by_amount[20].kind == DenominationKind.BILL
        assert self.cash_ledger.get_quantity(by_amount[1].id) == 100
        assert self.cash_ledger.get_quantity(by_amount[1000].id) == 2
        assert self.cash_ledger.get_quantity(by_amount[5].id) == 0
        # Every denomination has a stock row
        assert len(self.cash_ledger.get_stock()) == len(DEFAULT_DENOMINATIONS)

    def test_seed_denominations_is_idempotent(self):
        seed_denominations(self.catalog, self.cash_ledger, {10: 5})

        assert seed_denominations(self.catalog, self.cash_ledger, {10: 5}) == 0
        ten = next(d for d in self.catalog.list_all() if d.amount == 10)
        assert self.cash_ledger.get_quantity(ten.id) == 5

    def test_seed_demo_products(self):
        result = seed_demo_products(self.product_ledger, quantity=7)

        assert result["productsCreated"] == len(DEMO_PRODUCTS)
        items = self.product_ledger.list_active_products()
        assert len(items) == len(DEMO_PRODUCTS)
        assert all(item.quantity == 7 for item in items)

    def test_seed_demo_products_skips_when_products_exist(self):
        self.product_ledger.create_product("House Blend", 35, "HOUSE-001")

        result = seed_demo_products(self.product_ledger)

        assert result["productsCreated"] == 0
        assert self.storage.count("products") == 1
