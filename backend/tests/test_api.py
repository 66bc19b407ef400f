# Overview: Pytest coverage for the JSON API status codes and payload handling.

"""
API tests.

Verifies:
- Each ledger error kind maps to its HTTP status (400 / 404 / 409)
- Payload validation rejects unknown fields and non-integer amounts
- Sale edits through PUT keep omitted fields
"""

import pytest


@pytest.fixture
def seeded(store, product_a, product_b):
    return store


def _record_sale(client, **overrides):
    body = {"product_id": "A", "quantity": 3, "unit_price_cents": 500, "payment_method": "cash"}
    body.update(overrides)
    return client.post("/api/sales", json=body)


class TestHealth:

    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"


class TestProductsAndInventory:

    def test_list_products_with_stock(self, client, seeded):
        resp = client.get("/api/products")
        assert resp.status_code == 200
        stock = {p["id"]: p["stock"] for p in resp.json["items"]}
        assert stock == {"A": 10, "B": 4}

    def test_create_product(self, client, db_session):
        resp = client.post("/api/products", json={
            "id": "cylinder-standard", "name": "Standard Cylinder", "unit_price_cents": 4500, "starting_stock": 200,
        })
        assert resp.status_code == 201
        assert resp.json["product"]["stock"] == 200

    def test_create_product_rejects_unknown_field(self, client, db_session):
        resp = client.post("/api/products", json={"id": "x", "name": "X", "sku": "X-1"})
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [[1, 2], "A", 5])
    def test_create_product_rejects_non_object_body(self, client, db_session, body):
        resp = client.post("/api/products", json=body)
        assert resp.status_code == 400
        assert resp.json["error"] == "Invalid JSON payload"

    def test_duplicate_product(self, client, seeded):
        resp = client.post("/api/products", json={"id": "A", "name": "Again"})
        assert resp.status_code == 400

    def test_intake(self, client, seeded):
        resp = client.post("/api/inventory/intake", json={"product_id": "A", "quantity": 5})
        assert resp.status_code == 201
        assert resp.json["quantity"] == 15
        assert client.get("/api/inventory/A").json["quantity"] == 15

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_intake_rejects_non_positive(self, client, seeded, quantity):
        resp = client.post("/api/inventory/intake", json={"product_id": "A", "quantity": quantity})
        assert resp.status_code == 400

    def test_intake_rejects_decimal(self, client, seeded):
        resp = client.post("/api/inventory/intake", json={"product_id": "A", "quantity": 1.5})
        assert resp.status_code == 400
        assert "integer" in resp.json["error"]

    def test_unknown_product_stock(self, client, seeded):
        assert client.get("/api/inventory/nope").status_code == 404


class TestSales:

    def test_record_sale(self, client, seeded):
        resp = _record_sale(client, customer="Ama")
        assert resp.status_code == 201
        sale = resp.json["sale"]
        assert sale["total_cents"] == 1500

        cash = client.get("/api/ledger/cash").json["items"]
        assert [(e["id"], e["amount_cents"]) for e in cash] == [(sale["id"], 1500)]
        assert client.get("/api/inventory/A").json["quantity"] == 7

    def test_insufficient_stock_is_conflict(self, client, seeded):
        resp = _record_sale(client, quantity=50)
        assert resp.status_code == 409
        assert resp.json["details"]["on_hand"] == 10
        assert client.get("/api/sales").json["items"] == []

    def test_momo_without_reference(self, client, seeded):
        resp = _record_sale(client, payment_method="mobile-money")
        assert resp.status_code == 400

    def test_missing_required_field(self, client, seeded):
        resp = client.post("/api/sales", json={"product_id": "A", "quantity": 1})
        assert resp.status_code == 400
        assert "Missing required fields" in resp.json["error"]

    def test_unknown_product(self, client, seeded):
        resp = _record_sale(client, product_id="nope")
        assert resp.status_code == 404

    def test_put_keeps_omitted_fields(self, client, seeded):
        sale_id = _record_sale(client, customer="Ama").json["sale"]["id"]

        resp = client.put(f"/api/sales/{sale_id}", json={"quantity": 5})

        assert resp.status_code == 200
        sale = resp.json["sale"]
        assert sale["quantity"] == 5
        assert sale["unit_price_cents"] == 500
        assert sale["customer"] == "Ama"
        assert client.get("/api/inventory/A").json["quantity"] == 5

    def test_put_switches_ledger(self, client, seeded):
        sale_id = _record_sale(client).json["sale"]["id"]

        resp = client.put(f"/api/sales/{sale_id}", json={"payment_method": "mobile-money", "payment_ref": "MM-9"})

        assert resp.status_code == 200
        assert client.get("/api/ledger/cash").json["items"] == []
        momo = client.get("/api/ledger/momo").json["items"]
        assert [(e["id"], e["amount_cents"], e["payment_ref"]) for e in momo] == [(sale_id, 1500, "MM-9")]

    def test_put_over_stock_is_conflict(self, client, seeded):
        sale_id = _record_sale(client).json["sale"]["id"]
        resp = client.put(f"/api/sales/{sale_id}", json={"product_id": "B", "quantity": 5})
        assert resp.status_code == 409
        assert client.get("/api/inventory/A").json["quantity"] == 7
        assert client.get("/api/inventory/B").json["quantity"] == 4

    def test_delete_sale(self, client, seeded):
        sale_id = _record_sale(client).json["sale"]["id"]

        assert client.delete(f"/api/sales/{sale_id}").status_code == 200
        assert client.get(f"/api/sales/{sale_id}").status_code == 404
        assert client.delete(f"/api/sales/{sale_id}").status_code == 404
        assert client.get("/api/inventory/A").json["quantity"] == 10


class TestWithdrawalsAndCustomers:

    def test_withdrawal_crud(self, client, seeded):
        resp = client.post("/api/withdrawals", json={"category": "rent", "amount_cents": 2000, "note": "March"})
        assert resp.status_code == 201
        wid = resp.json["withdrawal"]["id"]

        resp = client.put(f"/api/withdrawals/{wid}", json={"amount_cents": 2500})
        assert resp.status_code == 200
        assert resp.json["withdrawal"]["note"] == "March"
        assert resp.json["withdrawal"]["amount_cents"] == 2500

        assert client.delete(f"/api/withdrawals/{wid}").status_code == 200
        assert client.get(f"/api/withdrawals/{wid}").status_code == 404

    def test_withdrawal_rejects_zero(self, client, seeded):
        resp = client.post("/api/withdrawals", json={"category": "rent", "amount_cents": 0})
        assert resp.status_code == 400

    def test_customers(self, client, db_session):
        assert client.post("/api/customers", json={"name": "Ama"}).status_code == 201
        assert client.post("/api/customers", json={"name": "Ama"}).status_code == 400
        assert [c["name"] for c in client.get("/api/customers").json["items"]] == ["Ama"]
        assert client.delete("/api/customers/Ama").status_code == 200
        assert client.delete("/api/customers/Ama").status_code == 404


class TestSummary:

    def test_summary_matches_ledgers(self, client, seeded):
        _record_sale(client)
        _record_sale(client, product_id="B", quantity=1, unit_price_cents=1000,
                     payment_method="mobile-money", payment_ref="MM-1")
        client.post("/api/withdrawals", json={"category": "fuel", "amount_cents": 250})

        resp = client.get("/api/ledger/summary")

        assert resp.status_code == 200
        assert resp.json["summary"] == {
            "total_sales": 2500,
            "total_cash": 1500,
            "total_momo": 1000,
            "total_withdrawals": 250,
            "total_stock_value": 7 * 500 + 3 * 1000,
        }
        assert resp.json["formatted"]["total_sales"] == "$25.00"
        assert resp.json["formatted"]["total_stock_value"] == "$65.00"
