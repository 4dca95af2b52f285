"""Threshold settings endpoint (orderer only)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import ThresholdSettingsResponse, ThresholdUpdate
from ..use_cases.threshold_settings import update_threshold_use_case

router = APIRouter(prefix="/settings", tags=["settings"])


@router.put("/threshold", response_model=ThresholdSettingsResponse)
def update_threshold(
    data: ThresholdUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return update_threshold_use_case(db=db, current_user=current_user, value=data.min_pending_items)
