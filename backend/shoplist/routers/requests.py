"""Shopping list request endpoints (any authenticated role)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import ActiveRequestOut, AddRequestCreate, AddRequestResponse, OkResponse
from ..use_cases.request_ledger import (
    add_request_use_case,
    cancel_request_use_case,
    get_active_requests,
)

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("/active", response_model=list[ActiveRequestOut])
def list_active_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_active_requests(db=db)


@router.post("", response_model=AddRequestResponse)
def add_request(
    data: AddRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = add_request_use_case(db=db, current_user=current_user, item_id=data.item_id)
    return AddRequestResponse(
        already_on_list=outcome.already_on_list,
        trigger=outcome.trigger,
        current_distinct_items=outcome.current_distinct_items,
    )


@router.delete("/{request_id}", response_model=OkResponse)
def cancel_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cancel_request_use_case(db=db, current_user=current_user, request_id=request_id)
    return OkResponse()
