"""Pydantic schemas for API."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Literal, Optional
from datetime import datetime


TriggerName = Literal["immediate", "threshold"]


class UserBrief(BaseModel):
    """Identity of the calling user."""
    id: int
    email: str
    role: str
    model_config = ConfigDict(from_attributes=True)


class CurrentUserResponse(UserBrief):
    permissions: dict[str, bool]


# Catalog schemas
class ItemUpsert(BaseModel):
    name: str
    category: str
    is_evergreen: bool = False


class ItemFindOrCreate(BaseModel):
    name: str
    category: Optional[str] = None


class ItemResponse(BaseModel):
    id: int
    name: str
    category: str
    is_evergreen: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# Threshold schemas
class ThresholdUpdate(BaseModel):
    # Passed through raw; the use-case validates type and range so the error carries a domain code.
    min_pending_items: Any


class ThresholdSettingsResponse(BaseModel):
    min_pending_items: int
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ThresholdStatus(BaseModel):
    min_pending_items: int
    current_distinct_items: int
    remaining_until_threshold: int


# Request ledger schemas
class AddRequestCreate(BaseModel):
    item_id: int


class AddRequestResponse(BaseModel):
    already_on_list: bool
    trigger: Optional[TriggerName] = None
    current_distinct_items: int = Field(ge=0)


class ActiveRequestOut(BaseModel):
    """Active request joined with its item and requester."""
    id: int
    status: str
    created_at: Optional[datetime] = None
    item_id: int
    item_name: str
    item_category: str
    item_is_evergreen: bool
    requester_id: int
    requester_email: str


# Fulfillment schemas
class FulfillmentResultResponse(BaseModel):
    fulfillment_id: int
    fulfilled_count: int
    trigger: TriggerName
    model_config = ConfigDict(from_attributes=True)


class FulfilledRequestOut(BaseModel):
    id: int
    item_id: int
    item_name: str
    item_category: str
    requester_email: str
    created_at: Optional[datetime] = None


class PastFulfillmentOut(BaseModel):
    id: int
    trigger: TriggerName
    fulfilled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    requests: list[FulfilledRequestOut] = Field(default_factory=list)


# Notification schemas
class NotificationOut(BaseModel):
    id: int
    type: TriggerName
    message: str
    metadata: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None


class DashboardResponse(BaseModel):
    current_user: CurrentUserResponse
    items: list[ItemResponse]
    current_list: list[ActiveRequestOut]
    threshold: ThresholdStatus
    notifications: list[NotificationOut] = Field(default_factory=list)
    past_fulfillments: list[PastFulfillmentOut] = Field(default_factory=list)


class OkResponse(BaseModel):
    ok: bool = True
