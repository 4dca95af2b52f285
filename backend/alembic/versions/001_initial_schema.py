"""initial schema: catalog, requests, fulfillments, settings, notifications

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_REQUEST_SQL = "status IN ('pending', 'in_fulfillment') AND fulfillment_id IS NULL"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('orderer', 'colleague')", name="chk_user_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("is_evergreen", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("name", "category", name="uq_items_name_category"),
    )
    op.create_index("ix_items_name", "items", ["name"])

    op.create_table(
        "fulfillments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("trigger", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("fulfilled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("trigger IN ('immediate', 'threshold')", name="chk_fulfillment_trigger"),
        sa.CheckConstraint("status IN ('pending', 'fulfilled')", name="chk_fulfillment_status"),
    )
    op.create_index("ix_fulfillments_fulfilled_at", "fulfillments", ["fulfilled_at"])

    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(
            "fulfillment_id",
            sa.Integer(),
            sa.ForeignKey("fulfillments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'in_fulfillment', 'fulfilled')",
            name="chk_request_status",
        ),
    )
    op.create_index("ix_requests_item_id", "requests", ["item_id"])
    op.create_index("ix_requests_requester_id", "requests", ["requester_id"])
    op.create_index("ix_requests_fulfillment_id", "requests", ["fulfillment_id"])
    op.create_index("ix_requests_created_at", "requests", ["created_at"])
    op.create_index(
        "uq_requests_one_active_per_item",
        "requests",
        ["item_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_REQUEST_SQL),
        sqlite_where=sa.text(ACTIVE_REQUEST_SQL),
    )

    op.create_table(
        "fulfillment_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("min_pending_items", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("id = 1", name="chk_fulfillment_settings_singleton"),
        sa.CheckConstraint("min_pending_items >= 1", name="chk_fulfillment_settings_min_pending_items"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("type IN ('immediate', 'threshold')", name="chk_notification_type"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("fulfillment_settings")
    op.drop_index("uq_requests_one_active_per_item", table_name="requests")
    op.drop_table("requests")
    op.drop_table("fulfillments")
    op.drop_table("items")
    op.drop_table("users")
