"""
Authentication and tenant resolution.

Editors authenticate with a JWT bearer token carrying the user id (`sub`)
and the store they are editing (`store_id`). Every store-scoped route
checks the path's store against the token's.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status

from backend.config import settings


@dataclass(frozen=True)
class Tenant:
    """The authenticated caller: who they are and which store they act for."""

    user_id: str
    store_id: str


def create_jwt(user_id: str, store_id: str, expires_in: timedelta | None = None) -> str:
    """
    Create a signed session token for a user editing one store.

    Args:
        user_id: Subject of the token
        store_id: Store the session is scoped to
        expires_in: Override for the configured lifetime

    Returns:
        Signed JWT string
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "store_id": str(store_id),
        "iat": now,
        "exp": now + (expires_in or timedelta(hours=settings.JWT_EXPIRY_HOURS)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please sign in again.",
        ) from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        ) from e


async def get_current_tenant(authorization: Annotated[str | None, Header()] = None) -> Tenant:
    """FastAPI dependency: resolve the Bearer token into a Tenant."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
        )

    payload = decode_jwt(authorization.removeprefix("Bearer "))
    user_id = payload.get("sub")
    store_id = payload.get("store_id")
    if not user_id or not store_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        )
    return Tenant(user_id=user_id, store_id=store_id)


async def require_store_access(store_id: str, tenant: Tenant = Depends(get_current_tenant)) -> Tenant:
    """FastAPI dependency for /stores/{store_id}/... routes: 403 unless the token is for this store."""
    if tenant.store_id != store_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to edit this store.",
        )
    return tenant
