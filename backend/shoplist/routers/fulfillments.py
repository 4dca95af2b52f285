"""Fulfillment endpoint (orderer only)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import FulfillmentResultResponse
from ..use_cases.fulfillment import fulfill_current_list_use_case

router = APIRouter(prefix="/fulfillments", tags=["fulfillments"])


@router.post("", response_model=FulfillmentResultResponse)
def fulfill_current_list(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return fulfill_current_list_use_case(db=db, current_user=current_user)
