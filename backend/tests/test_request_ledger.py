from __future__ import annotations

import pytest

from shoplist.domain_errors import NotFoundError
from shoplist.models import Item, ItemRequest, Notification
from shoplist.use_cases.fulfillment import fulfill_current_list_use_case
from shoplist.use_cases.request_ledger import (
    AlreadyActive,
    Created,
    add_request,
    add_request_use_case,
    cancel_request_use_case,
    get_active_requests,
)


def _active_rows(db, item_id):
    return (
        db.query(ItemRequest)
        .filter(
            ItemRequest.item_id == item_id,
            ItemRequest.status.in_(("pending", "in_fulfillment")),
            ItemRequest.fulfillment_id.is_(None),
        )
        .all()
    )


def test_first_add_creates_pending_request(db, colleague, make_item) -> None:
    item = make_item("Nuts")

    result = add_request(db=db, item_id=item.id, requester_id=colleague.id)
    db.commit()

    assert isinstance(result, Created)
    assert result.idempotent is False
    assert result.request.status == "pending"
    assert result.request.fulfillment_id is None
    assert result.request.requester_id == colleague.id
    assert result.request.is_active is True


def test_second_add_of_same_item_returns_existing_request(db, colleague, orderer, make_item) -> None:
    item = make_item("Nuts")
    first = add_request(db=db, item_id=item.id, requester_id=colleague.id)
    db.commit()

    second = add_request(db=db, item_id=item.id, requester_id=orderer.id)
    db.commit()

    assert isinstance(second, AlreadyActive)
    assert second.idempotent is True
    assert second.request.id == first.request.id
    assert second.request.requester_id == colleague.id
    assert len(_active_rows(db, item.id)) == 1


def test_duplicate_insert_rejected_by_index_keeps_outer_transaction_usable(db, colleague, make_item) -> None:
    nuts = make_item("Nuts")
    tea = make_item("Tea")

    add_request(db=db, item_id=nuts.id, requester_id=colleague.id)
    # Same transaction: the savepoint absorbs the violation.
    duplicate = add_request(db=db, item_id=nuts.id, requester_id=colleague.id)
    other = add_request(db=db, item_id=tea.id, requester_id=colleague.id)
    db.commit()

    assert isinstance(duplicate, AlreadyActive)
    assert isinstance(other, Created)
    assert db.query(ItemRequest).count() == 2


def test_add_unknown_item_raises_item_not_found(db, colleague) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        add_request_use_case(db=db, current_user=colleague, item_id=999)

    assert exc_info.value.code == "ITEM_NOT_FOUND"
    assert db.query(ItemRequest).count() == 0


def test_add_use_case_reports_already_on_list_without_notifying(db, orderer, colleague, make_item) -> None:
    item = make_item("Milk", is_evergreen=True)

    first = add_request_use_case(db=db, current_user=colleague, item_id=item.id)
    second = add_request_use_case(db=db, current_user=colleague, item_id=item.id)

    assert first.already_on_list is False
    assert first.trigger == "immediate"
    assert second.already_on_list is True
    assert second.trigger is None
    assert second.current_distinct_items == 1
    assert db.query(Notification).count() == 1


def test_cancel_removes_request_and_item_can_be_requested_again(db, colleague, make_item) -> None:
    item = make_item("Crackers")
    first = add_request(db=db, item_id=item.id, requester_id=colleague.id)
    db.commit()

    cancel_request_use_case(db=db, current_user=colleague, request_id=first.request.id)
    assert get_active_requests(db=db) == []

    again = add_request(db=db, item_id=item.id, requester_id=colleague.id)
    db.commit()
    assert isinstance(again, Created)
    assert again.request.id != first.request.id


def test_any_user_may_cancel_another_users_request(db, orderer, colleague, make_item) -> None:
    item = make_item("Crackers")
    created = add_request(db=db, item_id=item.id, requester_id=orderer.id)
    db.commit()

    cancel_request_use_case(db=db, current_user=colleague, request_id=created.request.id)

    assert db.query(ItemRequest).count() == 0


def test_cancel_unknown_request_raises_request_not_found(db, colleague) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        cancel_request_use_case(db=db, current_user=colleague, request_id=12345)
    assert exc_info.value.code == "REQUEST_NOT_FOUND"


def test_cancel_fulfilled_request_raises_request_not_found(db, orderer, make_item) -> None:
    item = make_item("Crackers")
    created = add_request(db=db, item_id=item.id, requester_id=orderer.id)
    db.commit()
    fulfill_current_list_use_case(db=db, current_user=orderer)

    with pytest.raises(NotFoundError) as exc_info:
        cancel_request_use_case(db=db, current_user=orderer, request_id=created.request.id)

    assert exc_info.value.code == "REQUEST_NOT_FOUND"
    assert db.query(ItemRequest).filter(ItemRequest.id == created.request.id).count() == 1


def test_fulfilled_item_can_become_active_again(db, orderer, make_item) -> None:
    item = make_item("Fruit")
    add_request(db=db, item_id=item.id, requester_id=orderer.id)
    db.commit()
    fulfill_current_list_use_case(db=db, current_user=orderer)

    result = add_request(db=db, item_id=item.id, requester_id=orderer.id)
    db.commit()

    assert isinstance(result, Created)
    assert db.query(ItemRequest).filter(ItemRequest.item_id == item.id).count() == 2
    assert len(_active_rows(db, item.id)) == 1


def test_active_requests_are_listed_most_recent_first_with_details(db, colleague, make_item) -> None:
    first_item = make_item("Nuts", category="Snacks")
    second_item = make_item("Tea", category="Beverages", is_evergreen=True)
    add_request_use_case(db=db, current_user=colleague, item_id=first_item.id)
    add_request_use_case(db=db, current_user=colleague, item_id=second_item.id)

    active = get_active_requests(db=db)

    assert [entry.item_name for entry in active] == ["Tea", "Nuts"]
    assert active[0].item_category == "Beverages"
    assert active[0].item_is_evergreen is True
    assert active[0].requester_email == colleague.email
    assert active[0].status == "pending"


def test_add_racing_a_commit_from_another_session_returns_that_request(
    db, session_factory, orderer, colleague, make_item
) -> None:
    item = make_item("Sparkling water")
    other = session_factory()
    try:
        # The other session loaded the item before the request existed.
        stale_item = other.get(Item, item.id)
        other.commit()

        winner = add_request(db=db, item_id=item.id, requester_id=colleague.id)
        db.commit()

        loser = add_request(db=other, item_id=stale_item.id, requester_id=orderer.id)
        other.commit()
    finally:
        other.close()

    assert isinstance(winner, Created)
    assert isinstance(loser, AlreadyActive)
    assert loser.request.id == winner.request.id
    assert loser.request.requester_id == colleague.id
    assert len(_active_rows(db, item.id)) == 1
