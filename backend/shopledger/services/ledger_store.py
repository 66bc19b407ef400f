# Overview: Service-layer owner of stock, sales, payment mirrors, withdrawals and customers.

"""
Ledger Store

WHY: A sale touches three records at once (stock, the sales ledger and one
payment ledger). Funnelling every mutation through one object keeps those
records consistent no matter which front end drives it.

Invariants (authoritative):
- Stock on hand is never negative; a violating operation is rejected before
  anything is written.
- Every sale has exactly one mirror row (CashEntry or MomoEntry) with the
  same id, amount = sale total and note "Sale of <product name>".
- Deleting a sale restores its quantity to stock and removes its mirror.
- Mirrors are never edited directly; edit_sale always drops and rebuilds
  the mirror from the sale's current fields.

Transactions:
- Each mutating method validates, mutates and commits in one transaction.
- Any LedgerError rolls the session back before propagating.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func

from ..models import Product, StockLevel, Sale, CashEntry, MomoEntry, Withdrawal, Customer
from ..models.sales import MIRROR_MODELS, PAYMENT_MOMO, VALID_PAYMENT_METHODS
from shopledger.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
from .errors import LedgerError, InvalidInput, InsufficientStock, NotFound


logger = logging.getLogger(__name__)


def new_record_id() -> str:
    return uuid.uuid4().hex


def _require_positive_int(value, field: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field} must be an integer", details={"field": field})
    if value <= 0:
        raise InvalidInput(f"{field} must be greater than zero", details={"field": field, "value": value})
    return value


def _require_text(value, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise InvalidInput(f"{field} is required", details={"field": field})
    return text


def _optional_text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class LedgerStore:
    """
    Single owner of the shop's ledgers.

    Construct it around a SQLAlchemy session (db.session inside a Flask app
    context); every read and write goes through that handle.
    """

    def __init__(self, session):
        self.session = session

    # =========================================================================
    # TRANSACTION PLUMBING
    # =========================================================================

    def run_in_transaction(self, op, action: str):
        """Run op and commit; any exception rolls the session back."""
        def _guarded():
            try:
                result = op()
                self.session.commit()
                return result
            except LedgerError as exc:
                self.session.rollback()
                logger.warning("%s rejected: %s %s", action, exc, exc.details)
                raise
            except Exception:
                self.session.rollback()
                raise
        return run_with_retry(self.session, _guarded)

    def _get_product(self, product_id) -> Product:
        product = self.session.get(Product, product_id) if product_id else None
        if product is None:
            raise NotFound(f"Product {product_id} not found", details={"product_id": product_id})
        return product

    def _stock_row(self, product_id: str, *, create: bool = False) -> StockLevel | None:
        row = lock_for_update(
            self.session.query(StockLevel).filter_by(product_id=product_id)
        ).first()
        if row is None and create:
            row = StockLevel(product_id=product_id, quantity=0)
            self.session.add(row)
        return row

    def _on_hand(self, product_id: str) -> int:
        row = self._stock_row(product_id)
        return row.quantity if row is not None else 0

    def _get_sale(self, sale_id) -> Sale:
        sale = self.session.get(Sale, sale_id) if sale_id else None
        if sale is None:
            raise NotFound(f"Sale {sale_id} not found", details={"sale_id": sale_id})
        return sale

    def _find_mirror(self, sale_id: str):
        # Look in every ledger rather than trusting the sale's current method
        for model in MIRROR_MODELS.values():
            entry = self.session.get(model, sale_id)
            if entry is not None:
                return entry
        return None

    def _build_mirror(self, sale: Sale, product: Product):
        model = MIRROR_MODELS[sale.payment_method]
        fields = {
            "id": sale.id,
            "occurred_at": sale.occurred_at,
            "amount_cents": sale.total_cents,
            "customer": sale.customer,
            "note": f"Sale of {product.name}",
        }
        if model is MomoEntry:
            fields["payment_ref"] = sale.payment_ref
        return model(**fields)

    def _validate_sale_fields(self, product_id, quantity, unit_price_cents, payment_method, payment_ref):
        _require_positive_int(quantity, "quantity")
        _require_positive_int(unit_price_cents, "unit_price_cents")

        if payment_method not in VALID_PAYMENT_METHODS:
            raise InvalidInput(
                f"Invalid payment method: {payment_method}. Must be one of {VALID_PAYMENT_METHODS}",
                details={"field": "payment_method", "value": payment_method},
            )

        ref = _optional_text(payment_ref)
        if payment_method == PAYMENT_MOMO and not ref:
            raise InvalidInput(
                "payment_ref is required for mobile-money payments",
                details={"field": "payment_ref"},
            )

        product = self._get_product(product_id)
        return product, (ref if payment_method == PAYMENT_MOMO else None)

    # =========================================================================
    # PRODUCTS & STOCK
    # =========================================================================

    def add_product(
        self,
        product_id: str,
        name: str,
        unit_price_cents: int | None = None,
        starting_stock: int = 0,
    ) -> Product:
        """Register a product and its opening stock."""
        def _op():
            pid = _require_text(product_id, "product_id")
            pname = _require_text(name, "name")
            if unit_price_cents is not None:
                if isinstance(unit_price_cents, bool) or not isinstance(unit_price_cents, int) or unit_price_cents < 0:
                    raise InvalidInput("unit_price_cents must be a non-negative integer", details={"field": "unit_price_cents"})
            if isinstance(starting_stock, bool) or not isinstance(starting_stock, int) or starting_stock < 0:
                raise InvalidInput("starting_stock must be a non-negative integer", details={"field": "starting_stock"})
            if self.session.get(Product, pid) is not None:
                raise InvalidInput(f"Product {pid} already exists", details={"product_id": pid})

            last = self.session.query(func.max(Product.position)).scalar() or 0
            product = Product(id=pid, name=pname, unit_price_cents=unit_price_cents, position=last + 1)
            self.session.add(product)
            self.session.add(StockLevel(product_id=pid, quantity=starting_stock))
            self.session.flush()
            logger.info("Added product %s (%s) with %d units", pid, pname, starting_stock)
            return product

        return self.run_in_transaction(_op, "add_product")

    def list_products(self) -> list[Product]:
        return self.session.query(Product).order_by(Product.position).all()

    def current_stock(self, product_id: str) -> int:
        self._get_product(product_id)
        return self._on_hand(product_id)

    def stock_levels(self) -> dict[str, int]:
        """Quantity on hand for every product (0 where no stock row exists)."""
        rows = dict(self.session.query(StockLevel.product_id, StockLevel.quantity).all())
        return {p.id: int(rows.get(p.id, 0)) for p in self.list_products()}

    def adjust_stock(self, product_id: str, delta: int) -> int:
        """
        Stock intake. Only positive deltas are accepted; decrements happen
        exclusively as a side effect of sales.
        """
        def _op():
            _require_positive_int(delta, "delta")
            self._get_product(product_id)
            row = self._stock_row(product_id, create=True)
            row.quantity = (row.quantity or 0) + delta
            self.session.flush()
            logger.info("Stock intake %s +%d -> %d", product_id, delta, row.quantity)
            return row.quantity

        return self.run_in_transaction(_op, "adjust_stock")

    # =========================================================================
    # SALES
    # =========================================================================

    def record_sale(
        self,
        product_id: str,
        quantity: int,
        unit_price_cents: int,
        payment_method: str,
        payment_ref: str | None = None,
        customer: str | None = None,
    ) -> Sale:
        """
        Record a sale: deduct stock, append the sale and its payment mirror.

        Raises:
            InvalidInput: non-positive quantity/price, unknown method,
                missing mobile-money reference
            NotFound: unknown product
            InsufficientStock: quantity exceeds stock on hand
        """
        def _op():
            product, ref = self._validate_sale_fields(
                product_id, quantity, unit_price_cents, payment_method, payment_ref
            )

            on_hand = self._on_hand(product.id)
            if on_hand < quantity:
                raise InsufficientStock(
                    "Insufficient stock to complete this sale",
                    details={"product_id": product.id, "requested_quantity": quantity, "on_hand": on_hand},
                )

            stock = self._stock_row(product.id)
            stock.quantity -= quantity

            sale = Sale(
                id=new_record_id(),
                occurred_at=utcnow(),
                product_id=product.id,
                quantity=quantity,
                unit_price_cents=unit_price_cents,
                total_cents=unit_price_cents * quantity,
                payment_method=payment_method,
                payment_ref=ref,
                customer=_optional_text(customer),
            )
            self.session.add(sale)
            self.session.add(self._build_mirror(sale, product))
            self.session.flush()

            logger.info(
                "Recorded sale %s: %s x%d = %d cents (%s)",
                sale.id, product.id, quantity, sale.total_cents, payment_method,
            )
            return sale

        return self.run_in_transaction(_op, "record_sale")

    def edit_sale(
        self,
        sale_id: str,
        product_id: str,
        quantity: int,
        unit_price_cents: int,
        payment_method: str,
        payment_ref: str | None = None,
        customer: str | None = None,
    ) -> Sale:
        """
        Replace a sale's fields, reconciling stock and regenerating its mirror.

        Same product: stock moves by the signed quantity difference.
        Different product: the old quantity goes back to the old product and
        the full new quantity comes out of the new product. Either the whole
        edit applies or nothing does.
        """
        def _op():
            sale = self._get_sale(sale_id)
            product, ref = self._validate_sale_fields(
                product_id, quantity, unit_price_cents, payment_method, payment_ref
            )

            old_product_id = sale.product_id
            old_quantity = sale.quantity

            if product.id == old_product_id:
                diff = quantity - old_quantity
                on_hand = self._on_hand(product.id)
                if diff > 0 and on_hand < diff:
                    raise InsufficientStock(
                        "Insufficient stock for the increased quantity",
                        details={"product_id": product.id, "requested_quantity": diff, "on_hand": on_hand},
                    )
                if diff:
                    self._stock_row(product.id, create=True).quantity -= diff
            else:
                on_hand = self._on_hand(product.id)
                if on_hand < quantity:
                    raise InsufficientStock(
                        "Insufficient stock for the new product and quantity",
                        details={"product_id": product.id, "requested_quantity": quantity, "on_hand": on_hand},
                    )
                self._stock_row(old_product_id, create=True).quantity += old_quantity
                self._stock_row(product.id).quantity -= quantity

            old_mirror = self._find_mirror(sale.id)
            if old_mirror is not None:
                self.session.delete(old_mirror)
                # Flush the delete before re-inserting under the same id
                self.session.flush()

            sale.product_id = product.id
            sale.quantity = quantity
            sale.unit_price_cents = unit_price_cents
            sale.total_cents = unit_price_cents * quantity
            sale.payment_method = payment_method
            sale.payment_ref = ref
            sale.customer = _optional_text(customer)

            self.session.add(self._build_mirror(sale, product))
            self.session.flush()

            logger.info(
                "Edited sale %s: %s x%d -> %s x%d (%s)",
                sale.id, old_product_id, old_quantity, product.id, quantity, payment_method,
            )
            return sale

        return self.run_in_transaction(_op, "edit_sale")

    def delete_sale(self, sale_id: str) -> None:
        """Remove a sale, give its quantity back to stock and drop its mirror."""
        def _op():
            sale = self._get_sale(sale_id)

            self._stock_row(sale.product_id, create=True).quantity += sale.quantity

            mirror = self._find_mirror(sale.id)
            if mirror is not None:
                self.session.delete(mirror)
                self.session.flush()
            self.session.delete(sale)
            self.session.flush()

            logger.info("Deleted sale %s, restored %d x %s", sale.id, sale.quantity, sale.product_id)

        return self.run_in_transaction(_op, "delete_sale")

    def get_sale(self, sale_id: str) -> Sale:
        return self._get_sale(sale_id)

    def list_sales(self) -> list[Sale]:
        return self.session.query(Sale).order_by(Sale.occurred_at, Sale.id).all()

    def list_cash_entries(self) -> list[CashEntry]:
        return self.session.query(CashEntry).order_by(CashEntry.occurred_at, CashEntry.id).all()

    def list_momo_entries(self) -> list[MomoEntry]:
        return self.session.query(MomoEntry).order_by(MomoEntry.occurred_at, MomoEntry.id).all()

    # =========================================================================
    # WITHDRAWALS
    # =========================================================================

    def _get_withdrawal(self, withdrawal_id) -> Withdrawal:
        entry = self.session.get(Withdrawal, withdrawal_id) if withdrawal_id else None
        if entry is None:
            raise NotFound(f"Withdrawal {withdrawal_id} not found", details={"withdrawal_id": withdrawal_id})
        return entry

    def record_withdrawal(self, category: str, amount_cents: int, note: str | None = "") -> Withdrawal:
        def _op():
            entry = Withdrawal(
                id=new_record_id(),
                occurred_at=utcnow(),
                category=_require_text(category, "category"),
                amount_cents=_require_positive_int(amount_cents, "amount_cents"),
                note=(note or "").strip(),
            )
            self.session.add(entry)
            self.session.flush()
            logger.info("Recorded withdrawal %s: %s %d cents", entry.id, entry.category, entry.amount_cents)
            return entry

        return self.run_in_transaction(_op, "record_withdrawal")

    def edit_withdrawal(
        self,
        withdrawal_id: str,
        category: str,
        amount_cents: int,
        note: str | None = "",
    ) -> Withdrawal:
        def _op():
            entry = self._get_withdrawal(withdrawal_id)
            new_category = _require_text(category, "category")
            new_amount = _require_positive_int(amount_cents, "amount_cents")

            entry.category = new_category
            entry.amount_cents = new_amount
            entry.note = (note or "").strip()
            self.session.flush()
            logger.info("Edited withdrawal %s", entry.id)
            return entry

        return self.run_in_transaction(_op, "edit_withdrawal")

    def delete_withdrawal(self, withdrawal_id: str) -> None:
        def _op():
            entry = self._get_withdrawal(withdrawal_id)
            self.session.delete(entry)
            self.session.flush()
            logger.info("Deleted withdrawal %s", withdrawal_id)

        return self.run_in_transaction(_op, "delete_withdrawal")

    def get_withdrawal(self, withdrawal_id: str) -> Withdrawal:
        return self._get_withdrawal(withdrawal_id)

    def list_withdrawals(self) -> list[Withdrawal]:
        return self.session.query(Withdrawal).order_by(Withdrawal.occurred_at, Withdrawal.id).all()

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    def add_customer(self, name: str) -> Customer:
        def _op():
            cname = _require_text(name, "name")
            if self.session.query(Customer).filter_by(name=cname).first() is not None:
                raise InvalidInput(f"Customer {cname} already exists", details={"name": cname})
            customer = Customer(name=cname)
            self.session.add(customer)
            self.session.flush()
            logger.info("Added customer %s", cname)
            return customer

        return self.run_in_transaction(_op, "add_customer")

    def delete_customer(self, name: str) -> None:
        def _op():
            cname = (name or "").strip()
            customer = self.session.query(Customer).filter_by(name=cname).first()
            if customer is None:
                raise NotFound(f"Customer {cname} not found", details={"name": cname})
            self.session.delete(customer)
            self.session.flush()
            logger.info("Deleted customer %s", cname)

        return self.run_in_transaction(_op, "delete_customer")

    def list_customers(self) -> list[Customer]:
        return self.session.query(Customer).order_by(Customer.id).all()

    # =========================================================================
    # SUMMARY
    # =========================================================================

    def _sum(self, column) -> int:
        return int(self.session.query(func.coalesce(func.sum(column), 0)).scalar() or 0)

    def compute_summary(self) -> dict:
        """
        Totals over the current state, in cents. Always computed fresh.

        Stock value is quantity on hand times unit price; products without
        a price count as zero.
        """
        stock_value = self.session.query(
            func.coalesce(
                func.sum(StockLevel.quantity * func.coalesce(Product.unit_price_cents, 0)),
                0,
            )
        ).select_from(StockLevel).join(Product, Product.id == StockLevel.product_id).scalar()

        return {
            "total_sales": self._sum(Sale.total_cents),
            "total_cash": self._sum(CashEntry.amount_cents),
            "total_momo": self._sum(MomoEntry.amount_cents),
            "total_withdrawals": self._sum(Withdrawal.amount_cents),
            "total_stock_value": int(stock_value or 0),
        }
