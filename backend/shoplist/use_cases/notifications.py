"""Notification trigger engine and per-user notification use-cases."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..domain_errors import notification_not_found
from ..models import Item, Notification, User
from ..schemas import NotificationOut
from ..services.active_list import count_distinct_active_items
from ..services.trigger_policy import Trigger, build_notification_payload, decide_request_trigger
from .threshold_settings import get_or_init_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerEvaluation:
    trigger: Optional[Trigger]
    current_distinct_items: int
    min_pending_items: int


def notify_orderers(
    *,
    db: Session,
    notification_type: Trigger,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> list[Notification]:
    """Add one notification per orderer. Does not commit."""
    orderer_ids = [row[0] for row in db.query(User.id).filter(User.role == "orderer").order_by(User.id).all()]
    notifications = [
        Notification(user_id=orderer_id, type=notification_type, message=message, meta_data=metadata)
        for orderer_id in orderer_ids
    ]
    if notifications:
        db.add_all(notifications)
    return notifications


def evaluate_request_trigger(*, db: Session, item: Item, requester_id: int) -> TriggerEvaluation:
    """Decide and record the trigger for a newly created request.

    Runs inside the caller's unit of work, after the request row is flushed so
    the distinct count already includes it.
    """
    current_settings = get_or_init_settings(db=db)
    current_distinct_items = count_distinct_active_items(db)
    min_pending_items = int(current_settings.min_pending_items)

    trigger = decide_request_trigger(
        is_evergreen=bool(item.is_evergreen),
        distinct_active_items=current_distinct_items,
        min_pending_items=min_pending_items,
    )
    if trigger is None:
        return TriggerEvaluation(
            trigger=None,
            current_distinct_items=current_distinct_items,
            min_pending_items=min_pending_items,
        )

    message, metadata = build_notification_payload(
        trigger,
        item_id=item.id,
        item_name=item.name,
        requester_id=requester_id,
        distinct_active_items=current_distinct_items,
        min_pending_items=min_pending_items,
    )
    created = notify_orderers(db=db, notification_type=trigger, message=message, metadata=metadata)
    logger.info(
        "trigger.fired type=%s item=%s distinct=%s threshold=%s recipients=%s",
        trigger,
        item.id,
        current_distinct_items,
        min_pending_items,
        len(created),
    )
    return TriggerEvaluation(
        trigger=trigger,
        current_distinct_items=current_distinct_items,
        min_pending_items=min_pending_items,
    )


def mark_notification_read_use_case(*, db: Session, current_user: User, notification_id: int) -> None:
    """Set read_at on the caller's own notification."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == current_user.id,
    ).first()
    if not notification:
        raise notification_not_found()

    # Idempotent: keep the first read timestamp.
    if notification.read_at is not None:
        return

    notification.read_at = datetime.now(timezone.utc)
    db.commit()


def list_unread_notifications(*, db: Session, current_user: User, limit: int) -> list[NotificationOut]:
    rows = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.read_at.is_(None))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    return [
        NotificationOut(
            id=row.id,
            type=row.type,
            message=row.message,
            metadata=row.meta_data,
            created_at=row.created_at,
        )
        for row in rows
    ]
