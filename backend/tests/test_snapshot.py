"""Snapshot export/import tests."""

import pytest

from shopledger.services.errors import InvalidInput
from shopledger.services.snapshot_service import export_snapshot, import_snapshot


@pytest.fixture
def busy_store(store, product_a, product_b):
    store.record_sale("A", 2, 500, "cash", customer="Ama")
    store.record_sale("B", 1, 1000, "mobile-money", payment_ref="MM-1")
    store.record_withdrawal("rent", 3000, "March")
    store.add_customer("Ama")
    return store


class TestExport:

    def test_export_layout(self, busy_store):
        snapshot = export_snapshot(busy_store)

        assert set(snapshot) == {
            "products", "stock", "sales", "cash_entries", "momo_entries", "withdrawals", "customers",
        }
        assert snapshot["stock"] == {"A": 8, "B": 3}
        assert [p["id"] for p in snapshot["products"]] == ["A", "B"]
        assert len(snapshot["sales"]) == 2
        assert [e["amount_cents"] for e in snapshot["cash_entries"]] == [1000]
        assert [e["payment_ref"] for e in snapshot["momo_entries"]] == ["MM-1"]
        assert snapshot["customers"] == ["Ama"]


class TestImport:

    def test_round_trip_restores_state(self, busy_store):
        snapshot = export_snapshot(busy_store)
        summary = busy_store.compute_summary()

        busy_store.record_sale("A", 5, 500, "cash")
        busy_store.add_customer("Kofi")

        counts = import_snapshot(busy_store, snapshot)

        assert counts["sales"] == 2
        assert counts["mirrors"] == 2
        assert busy_store.compute_summary() == summary
        assert busy_store.stock_levels() == {"A": 8, "B": 3}
        assert [c.name for c in busy_store.list_customers()] == ["Ama"]

    def test_sale_without_mirror_rejected(self, busy_store):
        snapshot = export_snapshot(busy_store)
        before = export_snapshot(busy_store)
        snapshot["cash_entries"] = []

        with pytest.raises(InvalidInput) as exc:
            import_snapshot(busy_store, snapshot)

        assert "sale_ids" in exc.value.details
        assert export_snapshot(busy_store) == before

    def test_mirror_in_wrong_ledger_rejected(self, busy_store):
        snapshot = export_snapshot(busy_store)
        moved = snapshot["cash_entries"].pop()
        moved["payment_ref"] = "MM-X"
        snapshot["momo_entries"].append(moved)

        with pytest.raises(InvalidInput):
            import_snapshot(busy_store, snapshot)

    def test_mirror_amount_mismatch_rejected(self, busy_store):
        snapshot = export_snapshot(busy_store)
        snapshot["cash_entries"][0]["amount_cents"] += 1

        with pytest.raises(InvalidInput):
            import_snapshot(busy_store, snapshot)

    def test_negative_stock_rejected(self, busy_store):
        snapshot = export_snapshot(busy_store)
        snapshot["stock"]["A"] = -1

        with pytest.raises(InvalidInput):
            import_snapshot(busy_store, snapshot)
        assert busy_store.current_stock("A") == 8

    def test_unknown_key_rejected(self, store):
        with pytest.raises(InvalidInput):
            import_snapshot(store, {"ledger": []})

    def test_empty_snapshot_clears_everything(self, busy_store):
        import_snapshot(busy_store, {})
        assert busy_store.list_products() == []
        assert busy_store.list_sales() == []
        assert busy_store.list_withdrawals() == []
        assert busy_store.list_customers() == []

    def test_round_trip_keeps_product_order(self, store):
        store.add_product("zeta", "Zeta", starting_stock=1)
        store.add_product("alpha", "Alpha", starting_stock=2)
        snapshot = export_snapshot(store)

        import_snapshot(store, snapshot)

        assert [p.id for p in store.list_products()] == ["zeta", "alpha"]
        store.add_product("beta", "Beta")
        assert [p.id for p in store.list_products()] == ["zeta", "alpha", "beta"]

    @pytest.mark.parametrize("bad_id", [["x"], {"id": "x"}])
    def test_malformed_mirror_id_rejected(self, busy_store, bad_id):
        before = export_snapshot(busy_store)
        snapshot = export_snapshot(busy_store)
        snapshot["cash_entries"][0]["id"] = bad_id

        with pytest.raises(InvalidInput):
            import_snapshot(busy_store, snapshot)
        assert export_snapshot(busy_store) == before

    def test_malformed_sale_product_rejected(self, busy_store):
        snapshot = export_snapshot(busy_store)
        snapshot["sales"][0]["product_id"] = ["A"]

        with pytest.raises(InvalidInput):
            import_snapshot(busy_store, snapshot)
