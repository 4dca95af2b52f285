"""Identity boundary: bearer token decoding and role permissions.

Tokens are issued by the sign-in service (magic link flow); this backend only
verifies them and resolves the user they belong to.
"""
from datetime import timedelta
from typing import Optional
import time
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from .config import settings
from .database import get_db
from .models import User

# Bearer token scheme
security = HTTPBearer()


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    now = int(time.time())
    if expires_delta:
        exp = now + int(expires_delta.total_seconds())
    else:
        exp = now + int(settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    to_encode.update({"exp": exp, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise _credentials_error()

    exp = payload.get("exp")
    if exp is None:
        raise _credentials_error()
    try:
        exp_int = int(exp)
    except (TypeError, ValueError):
        raise _credentials_error()
    if int(time.time()) > exp_int + int(settings.JWT_LEEWAY_SECONDS):
        raise _credentials_error("Token expired")
    return payload


def _parse_token_subject(payload: dict) -> int:
    """Parse and validate JWT subject as a user id."""
    sub = payload.get("sub")
    if sub is None or sub == "":
        raise _credentials_error()
    try:
        return int(str(sub))
    except ValueError:
        raise _credentials_error()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user."""
    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = _parse_token_subject(payload)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    return user


# Role permissions matrix
ROLE_PERMISSIONS = {
    "orderer": {
        "canRequestItems": True,
        "canCancelRequests": True,
        "canManageCatalog": True,
        "canManageThreshold": True,
        "canFulfill": True,
        "canViewNotifications": True,
        "canViewHistory": True,
    },
    "colleague": {
        "canRequestItems": True,
        "canCancelRequests": True,
        "canManageCatalog": False,
        "canManageThreshold": False,
        "canFulfill": False,
        "canViewNotifications": False,
        "canViewHistory": False,
    },
}

PERMISSION_KEYS: tuple[str, ...] = tuple(ROLE_PERMISSIONS["orderer"].keys())


def check_permission(user: User, permission: str) -> bool:
    """Check if user has specific permission."""
    permissions = ROLE_PERMISSIONS.get(user.role, {})
    return permissions.get(permission, False)


def get_role_permissions(role: str) -> dict[str, bool]:
    """Return the full permission map for a role; unknown roles get nothing."""
    permissions = ROLE_PERMISSIONS.get(role, {})
    return {key: bool(permissions.get(key, False)) for key in PERMISSION_KEYS}
