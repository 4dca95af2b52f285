"""Dashboard read model for the current user."""
from __future__ import annotations

from sqlalchemy.orm import Session

from ..auth import get_role_permissions
from ..config import settings
from ..models import User
from ..schemas import CurrentUserResponse, DashboardResponse, ItemResponse, ThresholdStatus, UserBrief
from ..security import is_orderer
from ..services.trigger_policy import remaining_until_threshold
from ..unit_of_work import UnitOfWork
from .catalog import list_items_use_case
from .fulfillment import list_past_fulfillments
from .notifications import list_unread_notifications
from .request_ledger import get_active_requests
from .threshold_settings import get_or_init_settings


def get_dashboard_use_case(*, db: Session, current_user: User) -> DashboardResponse:
    """Catalog, current list and threshold status; orderers also get inbox and history."""
    with UnitOfWork(db):
        # May lazily create the settings row, hence the unit of work.
        current_settings = get_or_init_settings(db=db)
        min_pending_items = int(current_settings.min_pending_items)

    items = list_items_use_case(db=db)
    current_list = get_active_requests(db=db)
    distinct_active_items = len({entry.item_id for entry in current_list})

    notifications = []
    past_fulfillments = []
    if is_orderer(current_user):
        notifications = list_unread_notifications(
            db=db,
            current_user=current_user,
            limit=settings.NOTIFICATION_PAGE_SIZE,
        )
        past_fulfillments = list_past_fulfillments(db=db, limit=settings.FULFILLMENT_HISTORY_LIMIT)

    return DashboardResponse(
        current_user=CurrentUserResponse(
            **UserBrief.model_validate(current_user).model_dump(),
            permissions=get_role_permissions(current_user.role),
        ),
        items=[ItemResponse.model_validate(item) for item in items],
        current_list=current_list,
        threshold=ThresholdStatus(
            min_pending_items=min_pending_items,
            current_distinct_items=distinct_active_items,
            remaining_until_threshold=remaining_until_threshold(
                min_pending_items=min_pending_items,
                distinct_active_items=distinct_active_items,
            ),
        ),
        notifications=notifications,
        past_fulfillments=past_fulfillments,
    )
