# Overview: Whole-state JSON snapshot export and import for the ledger store.

"""
Snapshot layout (one key per collection):

    products      [{id, name, unit_price_cents}]
    stock         {product_id: quantity}
    sales         [Sale.to_dict()]
    cash_entries  [CashEntry.to_dict()]
    momo_entries  [MomoEntry.to_dict()]
    withdrawals   [Withdrawal.to_dict()]
    customers     [name]

Importing replaces every collection. The incoming document is checked
against the ledger invariants before anything is written: stock is
non-negative, every sale has exactly one mirror in the ledger matching its
payment method, and each mirror amount equals its sale total.
"""

from __future__ import annotations

import logging

from ..models import Product, StockLevel, Sale, CashEntry, MomoEntry, Withdrawal, Customer
from ..models.sales import PAYMENT_CASH, PAYMENT_MOMO, VALID_PAYMENT_METHODS
from shopledger.time_utils import parse_iso_datetime, utcnow
from .errors import InvalidInput
from .ledger_store import LedgerStore


logger = logging.getLogger(__name__)

SNAPSHOT_KEYS = ("products", "stock", "sales", "cash_entries", "momo_entries", "withdrawals", "customers")


def export_snapshot(store: LedgerStore) -> dict:
    """Serialize the full ledger state."""
    return {
        "products": [p.to_dict() for p in store.list_products()],
        "stock": store.stock_levels(),
        "sales": [s.to_dict() for s in store.list_sales()],
        "cash_entries": [e.to_dict() for e in store.list_cash_entries()],
        "momo_entries": [e.to_dict() for e in store.list_momo_entries()],
        "withdrawals": [w.to_dict() for w in store.list_withdrawals()],
        "customers": [c.name for c in store.list_customers()],
    }


def _int(value, field: str, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidInput(f"{field} must be an integer >= {minimum}", details={"field": field, "value": value})
    return value


def _when(value, field: str):
    try:
        return parse_iso_datetime(value) or utcnow()
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an ISO-8601 datetime", details={"field": field, "value": value})


def _records(data: dict, key: str) -> list:
    rows = data.get(key) or []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise InvalidInput(f"{key} must be a list of objects", details={"field": key})
    return rows


def _parse(data: dict) -> dict:
    if not isinstance(data, dict):
        raise InvalidInput("Snapshot must be a JSON object")
    unknown = set(data) - set(SNAPSHOT_KEYS)
    if unknown:
        raise InvalidInput(f"Unknown snapshot keys: {', '.join(sorted(unknown))}")

    products = {}
    for row in _records(data, "products"):
        pid = str(row.get("id") or "").strip()
        name = str(row.get("name") or "").strip()
        if not pid or not name:
            raise InvalidInput("Every product needs an id and a name", details={"product": row})
        if pid in products:
            raise InvalidInput(f"Duplicate product {pid}", details={"product_id": pid})
        price = row.get("unit_price_cents")
        if price is not None:
            _int(price, f"products[{pid}].unit_price_cents", minimum=0)
        products[pid] = Product(id=pid, name=name, unit_price_cents=price, position=len(products) + 1)

    stock_raw = data.get("stock") or {}
    if not isinstance(stock_raw, dict):
        raise InvalidInput("stock must be an object of product_id -> quantity")
    stock = {}
    for pid, qty in stock_raw.items():
        if pid not in products:
            raise InvalidInput(f"Stock for unknown product {pid}", details={"product_id": pid})
        stock[pid] = _int(qty, f"stock[{pid}]", minimum=0)

    sales = {}
    for row in _records(data, "sales"):
        sid = str(row.get("id") or "").strip()
        if not sid or sid in sales:
            raise InvalidInput("Every sale needs a unique id", details={"sale": row})
        pid = str(row.get("product_id") or "").strip()
        if pid not in products:
            raise InvalidInput(f"Sale {sid} references unknown product {pid}", details={"sale_id": sid})
        quantity = _int(row.get("quantity"), f"sales[{sid}].quantity", minimum=1)
        price = _int(row.get("unit_price_cents"), f"sales[{sid}].unit_price_cents", minimum=1)
        method = row.get("payment_method")
        if method not in VALID_PAYMENT_METHODS:
            raise InvalidInput(f"Sale {sid} has invalid payment method {method}", details={"sale_id": sid})
        ref = str(row.get("payment_ref") or "").strip() or None
        if method == PAYMENT_MOMO and not ref:
            raise InvalidInput(f"Sale {sid} is missing its payment reference", details={"sale_id": sid})
        total = price * quantity
        if row.get("total_cents", total) != total:
            raise InvalidInput(f"Sale {sid} total does not equal price x quantity", details={"sale_id": sid})
        sales[sid] = Sale(
            id=sid,
            occurred_at=_when(row.get("occurred_at"), f"sales[{sid}].occurred_at"),
            product_id=pid,
            quantity=quantity,
            unit_price_cents=price,
            total_cents=total,
            payment_method=method,
            payment_ref=ref if method == PAYMENT_MOMO else None,
            customer=str(row.get("customer") or "").strip() or None,
        )

    mirrors = []
    mirrored = set()
    for key, model, method in (
        ("cash_entries", CashEntry, PAYMENT_CASH),
        ("momo_entries", MomoEntry, PAYMENT_MOMO),
    ):
        for row in _records(data, key):
            eid = str(row.get("id") or "").strip()
            sale = sales.get(eid)
            if sale is None or sale.payment_method != method or eid in mirrored:
                raise InvalidInput(f"{key} entry {eid} does not mirror exactly one {method} sale", details={"id": eid})
            if row.get("amount_cents") != sale.total_cents:
                raise InvalidInput(f"{key} entry {eid} amount does not match its sale", details={"id": eid})
            mirrored.add(eid)
            fields = {
                "id": eid,
                "occurred_at": sale.occurred_at,
                "amount_cents": sale.total_cents,
                "customer": sale.customer,
                "note": f"Sale of {products[sale.product_id].name}",
            }
            if model is MomoEntry:
                fields["payment_ref"] = sale.payment_ref
            mirrors.append(model(**fields))

    missing = sorted(set(sales) - mirrored)
    if missing:
        raise InvalidInput("Sales without a payment ledger entry", details={"sale_ids": missing})

    withdrawals = []
    for row in _records(data, "withdrawals"):
        wid = str(row.get("id") or "").strip()
        category = str(row.get("category") or "").strip()
        if not wid or not category:
            raise InvalidInput("Every withdrawal needs an id and a category", details={"withdrawal": row})
        withdrawals.append(Withdrawal(
            id=wid,
            occurred_at=_when(row.get("occurred_at"), f"withdrawals[{wid}].occurred_at"),
            category=category,
            amount_cents=_int(row.get("amount_cents"), f"withdrawals[{wid}].amount_cents", minimum=1),
            note=str(row.get("note") or ""),
        ))

    names = data.get("customers") or []
    if not isinstance(names, list):
        raise InvalidInput("customers must be a list of names")
    customers = []
    for name in names:
        cname = str(name or "").strip()
        if not cname or cname in customers:
            raise InvalidInput("Customer names must be unique and non-blank", details={"name": name})
        customers.append(cname)

    return {
        "products": list(products.values()),
        "stock": [StockLevel(product_id=pid, quantity=stock.get(pid, 0)) for pid in products],
        "sales": list(sales.values()),
        "mirrors": mirrors,
        "withdrawals": withdrawals,
        "customers": [Customer(name=n) for n in customers],
    }


def import_snapshot(store: LedgerStore, data: dict) -> dict:
    """
    Replace the whole ledger state with a snapshot.

    Returns a count per collection. Raises InvalidInput (and writes
    nothing) if the snapshot breaks any ledger invariant.
    """
    def _op():
        parsed = _parse(data)
        session = store.session

        for model in (CashEntry, MomoEntry, Sale, StockLevel, Withdrawal, Customer, Product):
            session.query(model).delete(synchronize_session=False)
        # Old rows are gone; drop their stale instances before re-adding ids
        session.expunge_all()

        for key in ("products", "stock", "sales", "mirrors", "withdrawals", "customers"):
            session.add_all(parsed[key])
            session.flush()

        counts = {key: len(rows) for key, rows in parsed.items()}
        logger.info("Imported snapshot: %s", counts)
        return counts

    return store.run_in_transaction(_op, "import_snapshot")
