"""Notification endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import OkResponse
from ..use_cases.notifications import mark_notification_read_use_case

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/{notification_id}/read", response_model=OkResponse)
def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    mark_notification_read_use_case(db=db, current_user=current_user, notification_id=notification_id)
    return OkResponse()
