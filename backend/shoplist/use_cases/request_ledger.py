"""Request ledger: add, cancel and list active requests."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain_errors import item_not_found, request_not_found
from ..models import Item, ItemRequest, User
from ..schemas import ActiveRequestOut
from ..services.active_list import active_request_clause, count_distinct_active_items, find_active_request
from ..services.trigger_policy import Trigger
from ..unit_of_work import UnitOfWork
from .notifications import evaluate_request_trigger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Created:
    """A new active request was inserted."""

    request: ItemRequest
    idempotent: ClassVar[bool] = False


@dataclass(frozen=True)
class AlreadyActive:
    """The item already had an active request; nothing was written."""

    request: ItemRequest
    idempotent: ClassVar[bool] = True


AddRequestResult = Union[Created, AlreadyActive]


@dataclass(frozen=True)
class AddRequestOutcome:
    already_on_list: bool
    trigger: Optional[Trigger]
    current_distinct_items: int


def add_request(*, db: Session, item_id: int, requester_id: int) -> AddRequestResult:
    """Insert a pending request for `item_id` unless one is already active.

    The insert is attempted unconditionally; the partial unique index on
    active requests rejects a second one, and that violation (including one
    caused by a concurrent caller) is reported as AlreadyActive. Does not
    commit.
    """
    item = db.get(Item, item_id)
    if item is None:
        raise item_not_found()

    request = ItemRequest(item_id=item.id, requester_id=requester_id, status="pending", fulfillment_id=None)
    try:
        with db.begin_nested():
            db.add(request)
            db.flush()
    except IntegrityError:
        existing = find_active_request(db, item.id)
        if existing is None:
            raise
        return AlreadyActive(request=existing)
    return Created(request=request)


def add_request_use_case(*, db: Session, current_user: User, item_id: int) -> AddRequestOutcome:
    """Add the item to the current list and run trigger evaluation for new requests."""
    with UnitOfWork(db):
        result = add_request(db=db, item_id=item_id, requester_id=current_user.id)

        if isinstance(result, AlreadyActive):
            logger.debug("request.already_active item=%s request=%s", item_id, result.request.id)
            return AddRequestOutcome(
                already_on_list=True,
                trigger=None,
                current_distinct_items=count_distinct_active_items(db),
            )

        evaluation = evaluate_request_trigger(
            db=db,
            item=result.request.item,
            requester_id=current_user.id,
        )

    logger.info(
        "request.added item=%s request=%s user=%s trigger=%s",
        item_id,
        result.request.id,
        current_user.id,
        evaluation.trigger,
    )
    return AddRequestOutcome(
        already_on_list=False,
        trigger=evaluation.trigger,
        current_distinct_items=evaluation.current_distinct_items,
    )


def cancel_request(*, db: Session, request_id: int) -> None:
    """Delete a request if it is still active. Does not commit."""
    deleted = (
        db.query(ItemRequest)
        .filter(ItemRequest.id == request_id, active_request_clause())
        .delete(synchronize_session="evaluate")
    )
    if not deleted:
        raise request_not_found()


def cancel_request_use_case(*, db: Session, current_user: User, request_id: int) -> None:
    with UnitOfWork(db):
        cancel_request(db=db, request_id=request_id)
    logger.info("request.cancelled request=%s user=%s", request_id, current_user.id)


def get_active_requests(*, db: Session) -> list[ActiveRequestOut]:
    """Active requests with item and requester, most recent first."""
    rows = (
        db.query(ItemRequest, Item, User)
        .join(Item, ItemRequest.item_id == Item.id)
        .join(User, ItemRequest.requester_id == User.id)
        .filter(active_request_clause())
        .order_by(ItemRequest.created_at.desc(), ItemRequest.id.desc())
        .all()
    )
    return [
        ActiveRequestOut(
            id=request.id,
            status=request.status,
            created_at=request.created_at,
            item_id=item.id,
            item_name=item.name,
            item_category=item.category,
            item_is_evergreen=bool(item.is_evergreen),
            requester_id=requester.id,
            requester_email=requester.email,
        )
        for request, item, requester in rows
    ]
