"""
FastAPI Authentication Dependencies

The gateway authenticates callers and forwards their identity in headers:
    X-User-Id (or user-id), X-User-Role, X-User-Email
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from .models import Identity, UserRole
from .protocols import AuthError, PermissionDeniedError

logger = logging.getLogger(__name__)


async def get_current_identity(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    user_id: Optional[str] = Header(None, alias="user-id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_user_email: Optional[str] = Header(None, alias="X-User-Email"),
) -> Identity:
    """
    Resolve the caller identity from gateway headers.

    Raises:
        AuthError: no user id was forwarded, or the role is unknown
    """
    user_id_value = (x_user_id or user_id or "").strip()
    if not user_id_value:
        raise AuthError("User authentication required")

    try:
        role = UserRole((x_user_role or UserRole.USER.value).strip().lower())
    except ValueError as e:
        logger.warning(f"Rejected unknown role {x_user_role!r} for {user_id_value}")
        raise AuthError(f"Unknown role: {x_user_role}") from e

    return Identity(user_id=user_id_value, role=role, email=x_user_email or None)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Allow administrators only"""
    if not identity.is_admin:
        raise PermissionDeniedError("Administrator role required")
    return identity


__all__ = ["get_current_identity", "require_admin"]
