"""
Integration tests for the Vending Machine API
Tests end-to-end flows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from vending_machine.api import app
from vending_machine.api.deps import VendingSystem, get_vending_system
from vending_machine.config import VendingConfig
from vending_machine.storage import InMemoryStorage


@pytest.fixture
def system():
    """Vending system over in-memory storage with a seeded float"""
    config = VendingConfig(
        database_url="memory://",
        seed_on_startup=True,
        default_cash_quantities={1: 10, 5: 10, 10: 10, 20: 10, 50: 10, 100: 10},
        demo_product_quantity=3,
    )
    return VendingSystem(storage=InMemoryStorage(), config=config)


@pytest.fixture
def client(system):
    app.dependency_overrides[get_vending_system] = lambda: system
    yield TestClient(app)
    app.dependency_overrides.clear()


def _denomination_id(client, amount):
    r = client.get("/cash/denominations")
    return next(d["id"] for d in r.json() if d["amount"] == amount)


def _seed_products(client):
    r = client.post("/seed/demo-products")
    assert r.status_code == 200
    return {p["sku"]: p for p in client.get("/products").json()}


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert "endpoints" in r.json()


class TestCashEndpoints:
    """Denominations, float and change queries"""

    def test_list_denominations(self, client):
        r = client.get("/cash/denominations")

        assert r.status_code == 200
        amounts = [d["amount"] for d in r.json()]
        assert amounts == sorted(amounts, reverse=True)
        assert 1000 in amounts

    def test_validate_denomination(self, client):
        r = client.post("/cash/denominations/validate", json={
            "denominationId": _denomination_id(client, 10), "qty": 0
        })

        assert r.status_code == 200
        assert r.json()["valid"] is False

    def test_get_stock(self, client):
        r = client.get("/cash/stock")

        assert r.status_code == 200
        by_amount = {row["denomination"]["amount"]: row["quantity"] for row in r.json()}
        assert by_amount[100] == 10
        assert by_amount[1000] == 0

    def test_adjust_stock(self, client):
        denomination_id = _denomination_id(client, 20)

        r = client.patch(f"/cash/stock/{denomination_id}", json={"deltaQty": -4})

        assert r.status_code == 200
        assert r.json()["quantity"] == 6

    def test_adjust_stock_below_zero(self, client):
        denomination_id = _denomination_id(client, 20)

        r = client.patch(f"/cash/stock/{denomination_id}", json={"deltaQty": -11})

        assert r.status_code == 409
        assert r.json()["detail"]["kind"] == "Conflict"

    def test_adjust_unknown_denomination(self, client):
        r = client.patch("/cash/stock/missing", json={"deltaQty": 1})

        assert r.status_code == 404
        assert r.json()["detail"]["kind"] == "NotFound"

    def test_calculate_change(self, client):
        r = client.post("/cash/calculate-change", json={"amountToChange": 180})

        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["totalAmount"] == 180
        assert [(line["amount"], line["qty"]) for line in data["breakdown"]] == [
            (100, 1), (50, 1), (20, 1), (10, 1)
        ]

    def test_calculate_change_invalid_amount(self, client):
        r = client.post("/cash/calculate-change", json={"amountToChange": 0})

        assert r.status_code == 400

    def test_missing_field_is_validation_error(self, client):
        r = client.post("/cash/calculate-change", json={})

        assert r.status_code == 422


class TestProductEndpoints:
    """Product catalogue over HTTP"""

    def test_create_and_get_product(self, client):
        r = client.post("/products", json={"name": "Oolong", "price": 30, "sku": "OOLONG-001"})
        assert r.status_code == 201
        product_id = r.json()["id"]

        r = client.get(f"/products/{product_id}")
        assert r.status_code == 200
        assert r.json()["productStock"]["quantity"] == 0

    def test_duplicate_sku(self, client):
        client.post("/products", json={"name": "Oolong", "price": 30, "sku": "OOLONG-001"})
        r = client.post("/products", json={"name": "Oolong 2", "price": 30, "sku": "OOLONG-001"})

        assert r.status_code == 409

    def test_seed_is_idempotent(self, client):
        products = _seed_products(client)
        assert len(products) == 7
        assert products["COKE-001"]["productStock"]["quantity"] == 3

        r = client.post("/seed/demo-products")
        assert r.json()["productsCreated"] == 0

    def test_update_and_remove(self, client):
        cola = _seed_products(client)["COKE-001"]

        r = client.patch(f"/products/{cola['id']}", json={"price": 22, "isActive": False})
        assert r.status_code == 200
        assert r.json()["price"] == 22
        assert r.json()["isActive"] is False

        r = client.delete(f"/products/{cola['id']}")
        assert r.status_code == 200
        assert client.get(f"/products/{cola['id']}").status_code == 404

    def test_adjust_product_stock(self, client):
        cola = _seed_products(client)["COKE-001"]

        r = client.patch(f"/products/{cola['id']}/stock", json={"deltaQty": 2})
        assert r.json()["quantity"] == 5

        r = client.patch(f"/products/{cola['id']}/stock", json={"deltaQty": -6})
        assert r.status_code == 409


class TestOrderFlow:
    """End-to-end vending sessions"""

    def test_create_order_returns_order_id(self, client):
        r = client.post("/orders")

        assert r.status_code == 201
        body = r.json()
        assert set(body) == {"orderId"}
        assert client.get(f"/orders/{body['orderId']}").json()["status"] == "IN_PROGRESS"

    def test_purchase_flow(self, client):
        cola = _seed_products(client)["COKE-001"]

        r = client.post("/orders/deposit", json={
            "denominationId": _denomination_id(client, 50), "qty": 1
        })
        assert r.status_code == 200
        order_id = r.json()["orderId"]

        r = client.post("/orders/deposit", json={
            "orderId": order_id, "denominationId": _denomination_id(client, 10), "qty": 1
        })
        assert r.json()["totalAmount"] == 60

        r = client.post(f"/orders/{order_id}/select-product", json={"productId": cola["id"]})
        assert r.status_code == 200

        r = client.post(f"/orders/{order_id}/purchase")
        assert r.status_code == 200
        data = r.json()
        assert data["changeAmount"] == 40
        assert data["change"] == [{"amount": 20, "quantity": 2}]

        r = client.get(f"/orders/{order_id}")
        assert r.json()["status"] == "SUCCESS"
        assert client.get(f"/products/{cola['id']}").json()["productStock"]["quantity"] == 2

        r = client.post(f"/orders/{order_id}/purchase")
        assert r.status_code == 409

    def test_purchase_without_change_available(self, client, system):
        cola = _seed_products(client)["COKE-001"]
        for row in client.get("/cash/stock").json():
            if row["quantity"]:
                client.patch(f"/cash/stock/{row['denominationId']}", json={"deltaQty": -row["quantity"]})

        order_id = client.post("/orders/deposit", json={
            "denominationId": _denomination_id(client, 50), "qty": 1
        }).json()["orderId"]
        client.post(f"/orders/{order_id}/select-product", json={"productId": cola["id"]})

        r = client.post(f"/orders/{order_id}/purchase")

        assert r.status_code == 409
        assert client.get(f"/orders/{order_id}").json()["status"] == "IN_PROGRESS"
        assert client.get(f"/products/{cola['id']}").json()["productStock"]["quantity"] == 3

    def test_cancel_flow(self, client):
        order_id = client.post("/orders").json()["orderId"]
        for amount in (20, 20, 10):
            client.post("/orders/deposit", json={
                "orderId": order_id, "denominationId": _denomination_id(client, amount), "qty": 1
            })

        r = client.post(f"/orders/{order_id}/cancel", json={"reason": "Changed my mind"})

        assert r.status_code == 200
        assert r.json()["refundAmount"] == 50
        order = client.get(f"/orders/{order_id}").json()
        assert order["status"] == "CANCELLED"
        assert order["remark"] == "Changed my mind"
        assert len(order["change"]) == 3

    def test_cancel_without_body(self, client):
        order_id = client.post("/orders").json()["orderId"]

        r = client.post(f"/orders/{order_id}/cancel")

        assert r.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["remark"] == "Cancelled by customer"

    def test_inactive_denomination_rejected(self, client, system):
        ten = _denomination_id(client, 10)
        system.catalog.set_active(ten, False)

        r = client.post("/orders/deposit", json={"denominationId": ten, "qty": 1})

        assert r.status_code == 400
        assert r.json()["detail"]["kind"] == "InvalidArgument"
        assert client.get("/orders").json() == []

    def test_unknown_order(self, client):
        assert client.get("/orders/missing").status_code == 404
        assert client.post("/orders/missing/purchase").status_code == 404
