from __future__ import annotations

import pytest

from shoplist.domain_errors import ConflictError, ForbiddenRoleError, InvalidInputError, NotFoundError
from shoplist.models import Item, ItemRequest
from shoplist.use_cases.catalog import (
    delete_item_use_case,
    find_or_create_item_use_case,
    list_items_use_case,
    upsert_item_use_case,
)
from shoplist.use_cases.request_ledger import add_request_use_case


def test_create_item_trims_name_and_category(db, orderer) -> None:
    item = upsert_item_use_case(
        db=db,
        current_user=orderer,
        name="  Oat milk ",
        category=" Beverages ",
        is_evergreen=True,
    )

    assert item.id is not None
    assert item.name == "Oat milk"
    assert item.category == "Beverages"
    assert item.is_evergreen is True


@pytest.mark.parametrize(
    ("name", "category", "code"),
    [
        ("   ", "Snacks", "INVALID_ITEM_NAME"),
        ("", "Snacks", "INVALID_ITEM_NAME"),
        ("Nuts", "  ", "INVALID_CATEGORY"),
    ],
)
def test_blank_name_or_category_is_invalid_input(db, orderer, name, category, code) -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        upsert_item_use_case(db=db, current_user=orderer, name=name, category=category, is_evergreen=False)

    assert exc_info.value.code == code
    assert db.query(Item).count() == 0


def test_duplicate_name_and_category_is_conflict(db, orderer, make_item) -> None:
    make_item("Nuts", category="Snacks")

    with pytest.raises(ConflictError) as exc_info:
        upsert_item_use_case(db=db, current_user=orderer, name="Nuts", category="Snacks", is_evergreen=False)

    assert exc_info.value.code == "ITEM_ALREADY_EXISTS"
    assert db.query(Item).count() == 1


def test_same_name_in_other_category_is_allowed(db, orderer, make_item) -> None:
    make_item("Nuts", category="Snacks")

    upsert_item_use_case(db=db, current_user=orderer, name="Nuts", category="Baking", is_evergreen=False)

    assert db.query(Item).count() == 2


def test_update_item_changes_fields(db, orderer, make_item) -> None:
    item = make_item("Nuts", category="Snacks")

    updated = upsert_item_use_case(
        db=db,
        current_user=orderer,
        item_id=item.id,
        name="Mixed nuts",
        category="Snacks",
        is_evergreen=True,
    )

    assert updated.id == item.id
    assert db.get(Item, item.id).name == "Mixed nuts"
    assert db.get(Item, item.id).is_evergreen is True


def test_update_unknown_item_is_not_found(db, orderer) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        upsert_item_use_case(db=db, current_user=orderer, item_id=404, name="x", category="y", is_evergreen=False)
    assert exc_info.value.code == "ITEM_NOT_FOUND"


def test_colleague_cannot_manage_catalog(db, colleague, make_item) -> None:
    item = make_item("Nuts")

    with pytest.raises(ForbiddenRoleError):
        upsert_item_use_case(db=db, current_user=colleague, name="Tea", category="Beverages", is_evergreen=False)
    with pytest.raises(ForbiddenRoleError):
        delete_item_use_case(db=db, current_user=colleague, item_id=item.id)
    with pytest.raises(ForbiddenRoleError):
        find_or_create_item_use_case(db=db, current_user=colleague, name="Tea")

    assert [row.name for row in list_items_use_case(db=db)] == ["Nuts"]


def test_delete_item_removes_its_requests(db, orderer, colleague, make_item) -> None:
    item = make_item("Nuts")
    add_request_use_case(db=db, current_user=colleague, item_id=item.id)

    delete_item_use_case(db=db, current_user=orderer, item_id=item.id)

    assert db.query(Item).count() == 0
    assert db.query(ItemRequest).count() == 0


def test_delete_unknown_item_is_not_found(db, orderer) -> None:
    with pytest.raises(NotFoundError):
        delete_item_use_case(db=db, current_user=orderer, item_id=404)


def test_find_or_create_matches_ignoring_case(db, orderer, make_item) -> None:
    existing = make_item("Dark chocolate", category="Snacks")

    found = find_or_create_item_use_case(db=db, current_user=orderer, name=" dark CHOCOLATE ", category="snacks")

    assert found.id == existing.id
    assert db.query(Item).count() == 1


def test_find_or_create_defaults_category_and_creates_once(db, orderer) -> None:
    created = find_or_create_item_use_case(db=db, current_user=orderer, name="Batteries")
    again = find_or_create_item_use_case(db=db, current_user=orderer, name="batteries", category="")

    assert created.category == "General"
    assert created.is_evergreen is False
    assert again.id == created.id


def test_items_are_listed_by_name(db, make_item) -> None:
    for name in ("Tea", "Apples", "Milk"):
        make_item(name)

    assert [item.name for item in list_items_use_case(db=db)] == ["Apples", "Milk", "Tea"]
