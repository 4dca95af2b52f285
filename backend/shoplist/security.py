"""Role gates shared by use-cases."""

from __future__ import annotations

from .auth import check_permission
from .domain_errors import forbidden_role
from .models import User


def is_orderer(user: User) -> bool:
    return user.role == "orderer"


def require_orderer(user: User, permission: str | None = None) -> None:
    """Raise ForbiddenRole unless the user is an orderer (and holds `permission`)."""
    if not is_orderer(user):
        raise forbidden_role()
    if permission is not None and not check_permission(user, permission):
        raise forbidden_role()
