"""Initial schema: shops, items, staff, transactions

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261017_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "shops",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("upi_id", sa.String(length=255), nullable=True),
        sa.Column("upi_qr_url", sa.String(length=1024), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_shops"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), sa.ForeignKey("shops.id", name="fk_items_shop_id_shops"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("min_stock_alert", sa.Integer(), nullable=False),
        sa.Column("max_discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("max_discount_fixed", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_items"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_items_shop_id", "items", ["shop_id"], unique=False)
    op.create_index("ix_items_shop_name", "items", ["shop_id", "name"], unique=False)
    op.create_index("ix_items_shop_active", "items", ["shop_id", "is_active"], unique=False)

    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), sa.ForeignKey("shops.id", name="fk_staff_shop_id_shops"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("passcode_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_staff"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_staff_shop_id", "staff", ["shop_id"], unique=False)
    op.create_index("ix_staff_shop_active", "staff", ["shop_id", "is_active"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), sa.ForeignKey("shops.id", name="fk_transactions_shop_id_shops"), nullable=False),
        sa.Column("entered_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "inferred_item_id",
            sa.Integer(),
            sa.ForeignKey("items.id", name="fk_transactions_inferred_item_id_items", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id", name="fk_transactions_staff_id_staff"), nullable=False),
        sa.Column("payment_mode", sa.String(length=16), nullable=False),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_discount_override", sa.Boolean(), nullable=False),
        sa.Column("is_credit_settled", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_transactions"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_transactions_shop_id", "transactions", ["shop_id"], unique=False)
    op.create_index("ix_transactions_inferred_item_id", "transactions", ["inferred_item_id"], unique=False)
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"], unique=False)
    op.create_index("ix_transactions_shop_created", "transactions", ["shop_id", "created_at"], unique=False)
    op.create_index("ix_transactions_shop_mode", "transactions", ["shop_id", "payment_mode"], unique=False)
    op.create_index("ix_transactions_shop_staff", "transactions", ["shop_id", "staff_id"], unique=False)


def downgrade():
    op.drop_table("transactions")
    op.drop_table("staff")
    op.drop_table("items")
    op.drop_table("shops")
