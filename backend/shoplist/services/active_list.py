"""Query helpers for the active request set."""

from __future__ import annotations

from sqlalchemy import and_, distinct, func
from sqlalchemy.orm import Session

from ..models import ACTIVE_REQUEST_STATUSES, ItemRequest


def active_request_clause():
    """Matches the predicate of the one-active-request-per-item index."""
    return and_(
        ItemRequest.status.in_(ACTIVE_REQUEST_STATUSES),
        ItemRequest.fulfillment_id.is_(None),
    )


def find_active_request(db: Session, item_id: int) -> ItemRequest | None:
    return (
        db.query(ItemRequest)
        .filter(ItemRequest.item_id == item_id, active_request_clause())
        .first()
    )


def count_distinct_active_items(db: Session) -> int:
    count = (
        db.query(func.count(distinct(ItemRequest.item_id)))
        .filter(active_request_clause())
        .scalar()
    )
    return int(count or 0)
