from __future__ import annotations

from ..extensions import db
from shopledger.time_utils import to_utc_z


class Withdrawal(db.Model):
    """Money taken out of the till. Counts only toward summary totals."""
    __tablename__ = "withdrawals"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_withdrawals_amount_positive"),
    )

    id = db.Column(db.String(32), primary_key=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    note = db.Column(db.String(255), nullable=False, default="")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "category": self.category,
            "amount_cents": self.amount_cents,
            "note": self.note,
        }
