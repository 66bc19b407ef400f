from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data.

    Product.id is a caller-chosen slug (e.g. "cylinder-standard") and is the
    key every stock row and sale refers to. unit_price_cents is optional; a
    product without a price contributes nothing to stock value.
    """
    __tablename__ = "products"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    unit_price_cents = db.Column(db.Integer, nullable=True)

    # Insertion order; list_products sorts on it
    position = db.Column(db.Integer, nullable=False, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    stock_level = db.relationship("StockLevel", uselist=False, back_populates="product")

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price_cents": self.unit_price_cents,
        }


class StockLevel(db.Model):
    """On-hand quantity per product. Never negative."""
    __tablename__ = "stock_levels"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_stock_levels_non_negative"),
    )

    product_id = db.Column(db.String(64), db.ForeignKey("products.id"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product", back_populates="stock_level")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "updated_at": to_utc_z(self.updated_at),
        }
