"""Trigger decisions for request additions and fulfillments."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal, Optional

Trigger = Literal["immediate", "threshold"]

IMMEDIATE: Trigger = "immediate"
THRESHOLD: Trigger = "threshold"

IMMEDIATE_MESSAGE = "Staple added - order now"


def decide_request_trigger(
    *,
    is_evergreen: bool,
    distinct_active_items: int,
    min_pending_items: int,
) -> Optional[Trigger]:
    """Classify a newly created request.

    Evergreen items fire immediately regardless of list size. Otherwise the
    threshold fires only when the distinct count lands exactly on the
    configured minimum, so it is edge-triggered: adds past the threshold stay
    silent until the list is fulfilled and refills.
    """
    if is_evergreen:
        return IMMEDIATE
    if distinct_active_items == min_pending_items:
        return THRESHOLD
    return None


def decide_fulfillment_trigger(evergreen_flags: Iterable[bool]) -> Trigger:
    """Summary trigger for a fulfillment record: any staple makes it immediate."""
    return IMMEDIATE if any(evergreen_flags) else THRESHOLD


def threshold_message(min_pending_items: int) -> str:
    return f"List reached {min_pending_items} items - place order"


def build_notification_payload(
    trigger: Trigger,
    *,
    item_id: int,
    item_name: str,
    requester_id: int,
    distinct_active_items: int,
    min_pending_items: int,
) -> tuple[str, dict[str, Any]]:
    """Return (message, metadata) for the notifications of a fired trigger."""
    if trigger == IMMEDIATE:
        return IMMEDIATE_MESSAGE, {
            "item_id": item_id,
            "item_name": item_name,
            "requester_id": requester_id,
        }
    if trigger == THRESHOLD:
        return threshold_message(min_pending_items), {
            "current_distinct_items": distinct_active_items,
            "min_pending_items": min_pending_items,
        }
    raise ValueError(f"Unknown trigger: {trigger}")


def remaining_until_threshold(*, min_pending_items: int, distinct_active_items: int) -> int:
    return max(min_pending_items - distinct_active_items, 0)
