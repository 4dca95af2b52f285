"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    kind = "DomainError"

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Referenced item/request/notification is missing or not in the expected state."""

    kind = "NotFound"


class ForbiddenRoleError(DomainError):
    """Caller lacks the role required for the action."""

    kind = "ForbiddenRole"


class InvalidInputError(DomainError):
    kind = "InvalidInput"


class ConflictError(DomainError):
    kind = "Conflict"


class EmptyListError(DomainError):
    kind = "EmptyList"


def item_not_found() -> NotFoundError:
    return NotFoundError(code="ITEM_NOT_FOUND", http_status=404, message="Item not found.")


def request_not_found() -> NotFoundError:
    return NotFoundError(code="REQUEST_NOT_FOUND", http_status=404, message="Request not found.")


def notification_not_found() -> NotFoundError:
    return NotFoundError(
        code="NOTIFICATION_NOT_FOUND",
        http_status=404,
        message="Notification not found.",
    )


def forbidden_role(required_role: str = "orderer") -> ForbiddenRoleError:
    return ForbiddenRoleError(
        code="FORBIDDEN_ROLE",
        http_status=403,
        message="Only orderers can perform this action.",
        details={"required_role": required_role},
    )
