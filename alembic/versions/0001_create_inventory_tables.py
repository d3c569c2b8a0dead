"""Create inventory, inventory_logs and receipt_scans tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

standard_unit_type = sa.Enum("g", "ml", "count", name="standard_unit_type")
action_type_enum = sa.Enum("consumed", "spoiled", "adjusted", "added", name="action_type_enum")


def upgrade() -> None:
    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("initial_quantity", sa.Float(), nullable=False),
        sa.Column("current_quantity", sa.Float(), nullable=False),
        sa.Column("user_unit", sa.String(length=50), nullable=False),
        sa.Column("standard_unit", standard_unit_type, nullable=False),
        sa.Column("conversion_factor", sa.Float(), nullable=False),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=True, server_default=sa.text("1")),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.CheckConstraint("current_quantity >= 0", name="ck_inventory_current_quantity_nonneg"),
        sa.CheckConstraint("price IS NULL OR price >= 0", name="ck_inventory_price_nonneg"),
    )
    op.create_index("ix_inventory_id", "inventory", ["id"])
    op.create_index("ix_inventory_user_id", "inventory", ["user_id"])
    op.create_index("ix_inventory_expiration_date", "inventory", ["expiration_date"])

    op.create_table(
        "inventory_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "item_id",
            sa.Integer(),
            sa.ForeignKey("inventory.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action_type", action_type_enum, nullable=False),
        sa.Column("amount_changed", sa.Float(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    )
    op.create_index("ix_inventory_logs_id", "inventory_logs", ["id"])
    op.create_index("ix_inventory_logs_item_id", "inventory_logs", ["item_id"])

    op.create_table(
        "receipt_scans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("parsed_items", postgresql.JSONB(), nullable=True),
        sa.Column("items_added", sa.Integer(), nullable=True),
        sa.Column("items_failed", sa.Integer(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    )
    op.create_index("ix_receipt_scans_id", "receipt_scans", ["id"])
    op.create_index("ix_receipt_scans_user_id", "receipt_scans", ["user_id"])


def downgrade() -> None:
    op.drop_table("receipt_scans")
    op.drop_table("inventory_logs")
    op.drop_table("inventory")
    action_type_enum.drop(op.get_bind(), checkfirst=True)
    standard_unit_type.drop(op.get_bind(), checkfirst=True)
