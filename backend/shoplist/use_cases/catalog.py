"""Catalog use-cases (orderer-gated item maintenance)."""
from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain_errors import ConflictError, InvalidInputError, item_not_found
from ..models import Item, User
from ..security import require_orderer

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


def normalize_text(value: str | None, *, field_name: str, code: str) -> str:
    normalized = (value or "").strip()
    if not normalized:
        raise InvalidInputError(
            code=code,
            http_status=400,
            message=f"{field_name} is required.",
        )
    return normalized


def _duplicate_item_error(name: str, category: str) -> ConflictError:
    return ConflictError(
        code="ITEM_ALREADY_EXISTS",
        http_status=409,
        message="An item with this name and category already exists.",
        details={"name": name, "category": category},
    )


def list_items_use_case(*, db: Session) -> list[Item]:
    return db.query(Item).order_by(Item.name.asc(), Item.category.asc()).all()


def upsert_item_use_case(
    *,
    db: Session,
    current_user: User,
    name: str,
    category: str,
    is_evergreen: bool,
    item_id: int | None = None,
) -> Item:
    """Create an item, or update it when `item_id` is given."""
    require_orderer(current_user, "canManageCatalog")

    normalized_name = normalize_text(name, field_name="Item name", code="INVALID_ITEM_NAME")
    normalized_category = normalize_text(category, field_name="Category", code="INVALID_CATEGORY")

    if item_id is not None:
        item = db.get(Item, item_id)
        if item is None:
            raise item_not_found()
        item.name = normalized_name
        item.category = normalized_category
        item.is_evergreen = bool(is_evergreen)
    else:
        item = Item(
            name=normalized_name,
            category=normalized_category,
            is_evergreen=bool(is_evergreen),
        )
        db.add(item)

    try:
        db.commit()
    except IntegrityError as error:
        db.rollback()
        raise _duplicate_item_error(normalized_name, normalized_category) from error

    logger.info("catalog.item_saved user=%s item=%s created=%s", current_user.id, item.id, item_id is None)
    return item


def delete_item_use_case(*, db: Session, current_user: User, item_id: int) -> None:
    """Delete an item; its requests go with it (FK cascade)."""
    require_orderer(current_user, "canManageCatalog")

    deleted = db.query(Item).filter(Item.id == item_id).delete(synchronize_session="evaluate")
    if not deleted:
        raise item_not_found()
    db.commit()
    logger.info("catalog.item_deleted user=%s item=%s", current_user.id, item_id)


def _find_item_case_insensitive(db: Session, name: str, category: str) -> Item | None:
    return (
        db.query(Item)
        .filter(
            func.lower(Item.name) == name.lower(),
            func.lower(Item.category) == category.lower(),
        )
        .order_by(Item.id.asc())
        .first()
    )


def find_or_create_item_use_case(
    *,
    db: Session,
    current_user: User,
    name: str,
    category: str | None = None,
) -> Item:
    """Return the item matching (name, category) ignoring case, creating it if missing."""
    require_orderer(current_user, "canManageCatalog")

    normalized_name = normalize_text(name, field_name="Item name", code="INVALID_ITEM_NAME")
    normalized_category = (category or "").strip() or DEFAULT_CATEGORY

    existing = _find_item_case_insensitive(db, normalized_name, normalized_category)
    if existing is not None:
        return existing

    item = Item(name=normalized_name, category=normalized_category, is_evergreen=False)
    db.add(item)
    try:
        db.commit()
    except IntegrityError as error:
        # Lost a race with a concurrent create of the same pair.
        db.rollback()
        existing = _find_item_case_insensitive(db, normalized_name, normalized_category)
        if existing is None:
            raise _duplicate_item_error(normalized_name, normalized_category) from error
        return existing

    logger.info("catalog.item_created user=%s item=%s", current_user.id, item.id)
    return item
