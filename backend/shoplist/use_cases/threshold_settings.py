"""Threshold settings singleton: get-or-initialize and orderer updates."""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from numbers import Real

from sqlalchemy.orm import Session

from ..config import settings
from ..database import upsert_insert
from ..domain_errors import InvalidInputError
from ..models import SETTINGS_SINGLETON_ID, FulfillmentSettings, User
from ..security import require_orderer

logger = logging.getLogger(__name__)

# Upper bound of the INTEGER column holding the threshold.
MAX_MIN_PENDING_ITEMS = 2**31 - 1


def _load_settings(db: Session) -> FulfillmentSettings | None:
    return db.get(FulfillmentSettings, SETTINGS_SINGLETON_ID, populate_existing=True)


def get_or_init_settings(*, db: Session) -> FulfillmentSettings:
    """Return the singleton row, creating it with the default on first use.

    Concurrent first reads race on the fixed primary key; the loser's insert
    is a no-op and both re-read the same row. Does not commit.
    """
    current = _load_settings(db)
    if current is not None:
        return current

    default_value = max(int(settings.DEFAULT_MIN_PENDING_ITEMS), 1)
    stmt = (
        upsert_insert(db, FulfillmentSettings)
        .values(id=SETTINGS_SINGLETON_ID, min_pending_items=default_value)
        .on_conflict_do_nothing(index_elements=["id"])
    )
    db.execute(stmt)

    current = _load_settings(db)
    if current is None:
        raise RuntimeError("Failed to initialize fulfillment settings")
    logger.info("settings.initialized min_pending_items=%s", current.min_pending_items)
    return current


def validate_threshold(value: object) -> int:
    """Accept whole numbers in [1, MAX_MIN_PENDING_ITEMS]; anything else is InvalidThreshold."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise _invalid_threshold()
    if isinstance(value, int):
        number = value
    else:
        as_float = float(value)
        if not math.isfinite(as_float) or not as_float.is_integer():
            raise _invalid_threshold()
        number = int(as_float)
    if number < 1 or number > MAX_MIN_PENDING_ITEMS:
        raise _invalid_threshold()
    return number


def _invalid_threshold() -> InvalidInputError:
    return InvalidInputError(
        code="INVALID_THRESHOLD",
        http_status=400,
        message="Threshold must be at least 1.",
    )


def update_threshold_use_case(*, db: Session, current_user: User, value: object) -> FulfillmentSettings:
    """Upsert the singleton threshold (orderer only)."""
    require_orderer(current_user, "canManageThreshold")
    min_pending_items = validate_threshold(value)

    now = datetime.now(timezone.utc)
    stmt = (
        upsert_insert(db, FulfillmentSettings)
        .values(id=SETTINGS_SINGLETON_ID, min_pending_items=min_pending_items, updated_at=now)
        .on_conflict_do_update(
            index_elements=["id"],
            set_={"min_pending_items": min_pending_items, "updated_at": now},
        )
    )
    db.execute(stmt)
    db.commit()

    updated = _load_settings(db)
    logger.info(
        "settings.threshold_updated user=%s min_pending_items=%s",
        current_user.id,
        min_pending_items,
    )
    return updated
