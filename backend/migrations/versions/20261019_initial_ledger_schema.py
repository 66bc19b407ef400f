"""initial ledger schema

Revision ID: 20261019_ledger
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the shop ledger schema from scratch:
- products / stock_levels: product master and non-negative on-hand quantity
- sales: sale records
- cash_entries / momo_entries: one payment mirror per sale, keyed by sale id
- withdrawals: money taken out of the till
- customers: customer directory
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_ledger"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "products",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("position", name="uq_products_position"),
    )

    op.create_table(
        "stock_levels",
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("product_id"),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_levels_non_negative"),
    )

    op.create_table(
        "sales",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("payment_ref", sa.String(64), nullable=True),
        sa.Column("customer", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        sa.CheckConstraint("unit_price_cents > 0", name="ck_sales_price_positive"),
    )

    with op.batch_alter_table("sales", schema=None) as batch_op:
        batch_op.create_index("ix_sales_occurred_at", ["occurred_at"], unique=False)
        batch_op.create_index("ix_sales_product_id", ["product_id"], unique=False)
        batch_op.create_index("ix_sales_payment_method", ["payment_method"], unique=False)

    op.create_table(
        "cash_entries",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("customer", sa.String(255), nullable=True),
        sa.Column("note", sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["sales.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "momo_entries",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("payment_ref", sa.String(64), nullable=False),
        sa.Column("customer", sa.String(255), nullable=True),
        sa.Column("note", sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["sales.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "withdrawals",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("note", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount_cents > 0", name="ck_withdrawals_amount_positive"),
    )

    with op.batch_alter_table("withdrawals", schema=None) as batch_op:
        batch_op.create_index("ix_withdrawals_occurred_at", ["occurred_at"], unique=False)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_customers_name"),
        sqlite_autoincrement=True,
    )


def downgrade():
    op.drop_table("customers")
    op.drop_table("withdrawals")
    op.drop_table("momo_entries")
    op.drop_table("cash_entries")
    op.drop_table("sales")
    op.drop_table("stock_levels")
    op.drop_table("products")
