"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bedledger.core.exceptions import AuthenticationError, Forbidden
from bedledger.core.permissions import Principal, UserRole
from bedledger.core.security import verify_token
from bedledger.database import get_db

__all__ = ["get_current_admin", "get_current_owner", "get_current_principal", "get_db"]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """Get the caller from the JWT issued by the identity service."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    try:
        return Principal(
            id=UUID(user_id),
            role=UserRole(payload.get("role", UserRole.TENANT.value)),
        )
    except ValueError as e:
        raise AuthenticationError(f"Invalid token payload: {e}")


async def get_current_owner(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Get current caller and verify they may manage properties."""
    if not principal.is_owner:
        raise Forbidden("Owner access required")
    return principal


async def get_current_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Get current caller and verify they are an admin."""
    if not principal.is_admin:
        raise Forbidden("Admin access required")
    return principal
