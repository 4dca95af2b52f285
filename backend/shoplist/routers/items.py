"""Catalog endpoints (orderer only)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import ItemFindOrCreate, ItemResponse, ItemUpsert, OkResponse
from ..use_cases.catalog import (
    delete_item_use_case,
    find_or_create_item_use_case,
    list_items_use_case,
    upsert_item_use_case,
)

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=list[ItemResponse])
def list_items(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return list_items_use_case(db=db)


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(
    data: ItemUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return upsert_item_use_case(
        db=db,
        current_user=current_user,
        name=data.name,
        category=data.category,
        is_evergreen=data.is_evergreen,
    )


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    data: ItemUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return upsert_item_use_case(
        db=db,
        current_user=current_user,
        name=data.name,
        category=data.category,
        is_evergreen=data.is_evergreen,
        item_id=item_id,
    )


@router.delete("/{item_id}", response_model=OkResponse)
def delete_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_item_use_case(db=db, current_user=current_user, item_id=item_id)
    return OkResponse()


@router.post("/find-or-create", response_model=ItemResponse)
def find_or_create_item(
    data: ItemFindOrCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return find_or_create_item_use_case(
        db=db,
        current_user=current_user,
        name=data.name,
        category=data.category,
    )
