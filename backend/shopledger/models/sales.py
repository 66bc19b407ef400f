from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


PAYMENT_CASH = "cash"
PAYMENT_MOMO = "mobile-money"

VALID_PAYMENT_METHODS = [PAYMENT_CASH, PAYMENT_MOMO]


class Sale(db.Model):
    """
    Sale record.

    Every sale owns exactly one mirror row in either cash_entries or
    momo_entries, keyed by the same id. The mirror is always rebuilt from
    the sale's own fields, so the sale is the single source of truth.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint("unit_price_cents > 0", name="ck_sales_price_positive"),
        db.Index("ix_sales_occurred_at", "occurred_at"),
    )

    id = db.Column(db.String(32), primary_key=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)

    product_id = db.Column(db.String(64), db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False, index=True)
    # Mobile-money transaction reference; None for cash
    payment_ref = db.Column(db.String(64), nullable=True)
    customer = db.Column(db.String(255), nullable=True)

    product = db.relationship("Product")

    def __repr__(self) -> str:
        return f"<Sale id={self.id!r} product_id={self.product_id!r} qty={self.quantity} method={self.payment_method}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_cents": self.total_cents,
            "payment_method": self.payment_method,
            "payment_ref": self.payment_ref,
            "customer": self.customer,
        }


class CashEntry(db.Model):
    """Cash ledger row mirroring a cash sale."""
    __tablename__ = "cash_entries"

    payment_method = PAYMENT_CASH

    id = db.Column(db.String(32), db.ForeignKey("sales.id"), primary_key=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    customer = db.Column(db.String(255), nullable=True)
    note = db.Column(db.String(255), nullable=False, default="")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "amount_cents": self.amount_cents,
            "customer": self.customer,
            "note": self.note,
        }


class MomoEntry(db.Model):
    """Mobile-money ledger row mirroring a mobile-money sale."""
    __tablename__ = "momo_entries"

    payment_method = PAYMENT_MOMO

    id = db.Column(db.String(32), db.ForeignKey("sales.id"), primary_key=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_ref = db.Column(db.String(64), nullable=False)
    customer = db.Column(db.String(255), nullable=True)
    note = db.Column(db.String(255), nullable=False, default="")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "amount_cents": self.amount_cents,
            "payment_ref": self.payment_ref,
            "customer": self.customer,
            "note": self.note,
        }


# One mirror model per payment method
MIRROR_MODELS = {
    PAYMENT_CASH: CashEntry,
    PAYMENT_MOMO: MomoEntry,
}
