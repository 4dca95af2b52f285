"""Fulfillment engine: close out the current list into a historical order."""
from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..domain_errors import ConflictError, EmptyListError
from ..models import Fulfillment, Item, ItemRequest, User
from ..schemas import FulfilledRequestOut, PastFulfillmentOut
from ..security import require_orderer
from ..services.active_list import active_request_clause
from ..services.trigger_policy import Trigger, decide_fulfillment_trigger
from ..unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FulfillmentResult:
    fulfillment_id: int
    fulfilled_count: int
    trigger: Trigger


def fulfill_current_list_use_case(
    *,
    db: Session,
    current_user: User,
    now_utc: Callable[[], datetime] = _now_utc,
) -> FulfillmentResult:
    """Atomically stamp every active request with a new fulfillment record."""
    require_orderer(current_user, "canFulfill")

    with UnitOfWork(db) as uow:
        # Row locks keep concurrent cancels out until the close-out commits.
        snapshot = (
            db.query(ItemRequest.id, Item.is_evergreen)
            .join(Item, ItemRequest.item_id == Item.id)
            .filter(active_request_clause())
            .order_by(ItemRequest.id.asc())
            .with_for_update(of=ItemRequest)
            .all()
        )
        if not snapshot:
            raise EmptyListError(
                code="EMPTY_LIST",
                http_status=400,
                message="There are no pending items to fulfill.",
            )

        trigger = decide_fulfillment_trigger(bool(row.is_evergreen) for row in snapshot)
        fulfillment = Fulfillment(trigger=trigger, status="fulfilled", fulfilled_at=now_utc())
        db.add(fulfillment)
        uow.flush()

        request_ids = [row.id for row in snapshot]
        updated = (
            db.query(ItemRequest)
            .filter(ItemRequest.id.in_(request_ids), active_request_clause())
            .update(
                {"status": "fulfilled", "fulfillment_id": fulfillment.id},
                synchronize_session="evaluate",
            )
        )
        if updated != len(request_ids):
            raise ConflictError(
                code="LIST_CHANGED_DURING_FULFILLMENT",
                http_status=409,
                message="The list changed while it was being fulfilled. Please retry.",
                details={"expected": len(request_ids), "updated": updated},
            )
        fulfillment_id = fulfillment.id

    logger.info(
        "fulfillment.recorded id=%s user=%s count=%s trigger=%s",
        fulfillment_id,
        current_user.id,
        len(request_ids),
        trigger,
    )
    return FulfillmentResult(
        fulfillment_id=fulfillment_id,
        fulfilled_count=len(request_ids),
        trigger=trigger,
    )


def list_past_fulfillments(*, db: Session, limit: int) -> list[PastFulfillmentOut]:
    """Recent fulfillments, newest first, each with the requests it closed."""
    fulfillments = (
        db.query(Fulfillment)
        .filter(Fulfillment.status == "fulfilled")
        .order_by(
            Fulfillment.fulfilled_at.desc(),
            Fulfillment.created_at.desc(),
            Fulfillment.id.desc(),
        )
        .limit(limit)
        .all()
    )
    if not fulfillments:
        return []

    fulfillment_ids = [fulfillment.id for fulfillment in fulfillments]
    rows = (
        db.query(ItemRequest, Item, User)
        .join(Item, ItemRequest.item_id == Item.id)
        .join(User, ItemRequest.requester_id == User.id)
        .filter(ItemRequest.fulfillment_id.in_(fulfillment_ids))
        .order_by(ItemRequest.created_at.desc(), ItemRequest.id.desc())
        .all()
    )

    requests_by_fulfillment: dict[int, list[FulfilledRequestOut]] = defaultdict(list)
    for request, item, requester in rows:
        requests_by_fulfillment[request.fulfillment_id].append(
            FulfilledRequestOut(
                id=request.id,
                item_id=item.id,
                item_name=item.name,
                item_category=item.category,
                requester_email=requester.email,
                created_at=request.created_at,
            )
        )

    return [
        PastFulfillmentOut(
            id=fulfillment.id,
            trigger=fulfillment.trigger,
            fulfilled_at=fulfillment.fulfilled_at,
            created_at=fulfillment.created_at,
            requests=requests_by_fulfillment.get(fulfillment.id, []),
        )
        for fulfillment in fulfillments
    ]
