"""
Tests for JWT sessions and store-scoped access.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi import HTTPException

from backend.auth import Tenant, create_jwt, decode_jwt, get_current_tenant, require_store_access
from backend.config import settings


class TestJWT:
    """Test JWT creation and validation."""

    def test_round_trip(self):
        payload = decode_jwt(create_jwt("user_1", "store_1"))

        assert payload["sub"] == "user_1"
        assert payload["store_id"] == "store_1"
        assert "exp" in payload
        assert "iat" in payload

    def test_expired(self):
        token = create_jwt("user_1", "store_1", expires_in=timedelta(hours=-1))

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token)

        assert exc_info.value.status_code == 401
        assert "expired" in exc_info.value.detail.lower()

    def test_invalid(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt("invalid.token.here")
        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "u", "store_id": "s", "exp": datetime.now(UTC) + timedelta(hours=1)},
            "not-the-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(HTTPException):
            decode_jwt(token)


class TestTenant:
    """Test the FastAPI tenant dependencies directly."""

    async def test_bearer(self):
        tenant = await get_current_tenant(f"Bearer {create_jwt('user_1', 'store_1')}")
        assert tenant == Tenant(user_id="user_1", store_id="store_1")

    async def test_missing_header(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_tenant(None)
        assert exc_info.value.status_code == 401

    async def test_not_bearer(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_tenant("Basic abc")
        assert exc_info.value.status_code == 401

    async def test_token_without_store(self):
        token = jwt.encode(
            {"sub": "user_1", "exp": datetime.now(UTC) + timedelta(hours=1)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(HTTPException) as exc_info:
            await get_current_tenant(f"Bearer {token}")
        assert exc_info.value.status_code == 401

    async def test_store_match(self):
        tenant = Tenant(user_id="user_1", store_id="store_1")
        assert await require_store_access("store_1", tenant) is tenant

    async def test_store_mismatch(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_store_access("store_2", Tenant(user_id="user_1", store_id="store_1"))
        assert exc_info.value.status_code == 403
