"""SQLAlchemy models for the shared shopping list."""
from sqlalchemy import (
    JSON, Boolean, Column, String, Integer, DateTime, Text,
    ForeignKey, CheckConstraint, Index, UniqueConstraint, text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


USER_ROLES: tuple[str, ...] = ("orderer", "colleague")
REQUEST_STATUSES: tuple[str, ...] = ("pending", "in_fulfillment", "fulfilled")
ACTIVE_REQUEST_STATUSES: tuple[str, ...] = ("pending", "in_fulfillment")
FULFILLMENT_TRIGGERS: tuple[str, ...] = ("immediate", "threshold")
FULFILLMENT_STATUSES: tuple[str, ...] = ("pending", "fulfilled")
NOTIFICATION_TYPES: tuple[str, ...] = ("immediate", "threshold")

SETTINGS_SINGLETON_ID = 1
DEFAULT_MIN_PENDING_ITEMS = 5

# Shared by the partial unique index and every "active list" query.
ACTIVE_REQUEST_SQL = "status IN ('pending', 'in_fulfillment') AND fulfillment_id IS NULL"

JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    """Authenticated office member."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(role.in_(USER_ROLES), name="chk_user_role"),
    )

    requests = relationship("ItemRequest", back_populates="requester", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", passive_deletes=True)


class Item(Base):
    """Catalog item."""
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(255), nullable=False)
    is_evergreen = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", "category", name="uq_items_name_category"),
    )

    requests = relationship("ItemRequest", back_populates="item", passive_deletes=True)


class Fulfillment(Base):
    """Historical order record closing out a batch of requests."""
    __tablename__ = "fulfillments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trigger = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)
    fulfilled_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(trigger.in_(FULFILLMENT_TRIGGERS), name="chk_fulfillment_trigger"),
        CheckConstraint(status.in_(FULFILLMENT_STATUSES), name="chk_fulfillment_status"),
    )

    requests = relationship("ItemRequest", back_populates="fulfillment")


class ItemRequest(Base):
    """A colleague's request for an item to be on the current list."""
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", server_default="pending")
    fulfillment_id = Column(
        Integer,
        ForeignKey("fulfillments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(status.in_(REQUEST_STATUSES), name="chk_request_status"),
        # At most one active request per item, enforced by the store.
        Index(
            "uq_requests_one_active_per_item",
            "item_id",
            unique=True,
            postgresql_where=text(ACTIVE_REQUEST_SQL),
            sqlite_where=text(ACTIVE_REQUEST_SQL),
        ),
    )

    item = relationship("Item", back_populates="requests")
    requester = relationship("User", back_populates="requests")
    fulfillment = relationship("Fulfillment", back_populates="requests")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_REQUEST_STATUSES and self.fulfillment_id is None


class FulfillmentSettings(Base):
    """Singleton row holding the threshold policy."""
    __tablename__ = "fulfillment_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_SINGLETON_ID, autoincrement=False)
    min_pending_items = Column(
        Integer,
        nullable=False,
        default=DEFAULT_MIN_PENDING_ITEMS,
        server_default=str(DEFAULT_MIN_PENDING_ITEMS),
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(f"id = {SETTINGS_SINGLETON_ID}", name="chk_fulfillment_settings_singleton"),
        CheckConstraint(min_pending_items >= 1, name="chk_fulfillment_settings_min_pending_items"),
    )


class Notification(Base):
    """Per-orderer notification; only read_at is ever mutated."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    meta_data = Column("metadata", JSONType, nullable=True)  # 'metadata' is reserved by SQLAlchemy
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(type.in_(NOTIFICATION_TYPES), name="chk_notification_type"),
    )

    user = relationship("User", back_populates="notifications")
