from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from shoplist.auth import (
    PERMISSION_KEYS,
    ROLE_PERMISSIONS,
    check_permission,
    create_access_token,
    decode_token,
    get_role_permissions,
)
from shoplist.domain_errors import DomainError, ForbiddenRoleError
from shoplist.security import is_orderer, require_orderer


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        (
            "orderer",
            {
                "canRequestItems": True,
                "canCancelRequests": True,
                "canManageCatalog": True,
                "canManageThreshold": True,
                "canFulfill": True,
                "canViewNotifications": True,
                "canViewHistory": True,
            },
        ),
        (
            "colleague",
            {
                "canRequestItems": True,
                "canCancelRequests": True,
                "canManageCatalog": False,
                "canManageThreshold": False,
                "canFulfill": False,
                "canViewNotifications": False,
                "canViewHistory": False,
            },
        ),
    ],
)
def test_role_permissions_matrix_is_stable(role: str, expected: dict[str, bool]) -> None:
    assert get_role_permissions(role) == expected


def test_role_permissions_has_exact_keyset_for_each_role() -> None:
    expected_keys = set(PERMISSION_KEYS)
    for role in ROLE_PERMISSIONS:
        assert set(get_role_permissions(role).keys()) == expected_keys


def test_unknown_role_denies_all_permissions() -> None:
    permissions = get_role_permissions("unknown-role")
    assert set(permissions.keys()) == set(PERMISSION_KEYS)
    assert all(value is False for value in permissions.values())


def test_check_permission_uses_role_matrix() -> None:
    assert check_permission(SimpleNamespace(role="orderer"), "canFulfill") is True
    assert check_permission(SimpleNamespace(role="colleague"), "canFulfill") is False
    assert check_permission(SimpleNamespace(role="colleague"), "canRequestItems") is True


def test_require_orderer_rejects_colleague_with_forbidden_role() -> None:
    colleague = SimpleNamespace(id=2, role="colleague")

    with pytest.raises(ForbiddenRoleError) as exc_info:
        require_orderer(colleague, "canFulfill")

    assert isinstance(exc_info.value, DomainError)
    assert exc_info.value.code == "FORBIDDEN_ROLE"
    assert exc_info.value.http_status == 403
    assert exc_info.value.kind == "ForbiddenRole"


def test_require_orderer_accepts_orderer() -> None:
    orderer = SimpleNamespace(id=1, role="orderer")
    assert is_orderer(orderer) is True
    require_orderer(orderer, "canManageCatalog")


def test_access_token_round_trips_subject() -> None:
    token = create_access_token({"sub": "42"})
    payload = decode_token(token)

    assert payload["sub"] == "42"
    assert payload["type"] == "access"


def test_expired_token_is_rejected() -> None:
    token = create_access_token({"sub": "42"}, expires_delta=timedelta(hours=-1))

    with pytest.raises(HTTPException) as exc_info:
        decode_token(token)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token expired"


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(HTTPException) as exc_info:
        decode_token("not-a-jwt")
    assert exc_info.value.status_code == 401
