"""Unit tests for auth dependencies: JWT validation and viewer auto-creation."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from app.api.deps.auth import (
    get_current_user,
    get_current_user_optional,
    get_signing_key,
)

from tests.helpers.mock_factories import make_mock_user


# ---------------------------------------------------------------------------
# get_signing_key
# ---------------------------------------------------------------------------


class TestGetSigningKey:
    """Tests for JWKS key matching by kid."""

    def test_returns_key_when_kid_matches(self):
        jwks = {
            "keys": [
                {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "a", "y": "b"},
                {"kid": "key-2", "kty": "EC", "crv": "P-256", "x": "c", "y": "d"},
            ]
        }

        with (
            patch("app.api.deps.auth.jwt") as mock_jwt,
            patch("app.api.deps.auth.ECKey") as mock_eckey,
        ):
            mock_jwt.get_unverified_header.return_value = {"kid": "key-2"}
            expected_key = MagicMock()
            mock_eckey.return_value = expected_key

            assert get_signing_key(jwks, "dummy") == expected_key
            mock_eckey.assert_called_once_with(jwks["keys"][1], algorithm="ES256")

    def test_raises_when_no_matching_kid(self):
        jwks = {"keys": [{"kid": "key-1", "kty": "EC", "crv": "P-256"}]}

        with patch("app.api.deps.auth.jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"kid": "missing-kid"}

            with pytest.raises(ValueError, match="Unable to find matching key"):
                get_signing_key(jwks, "dummy")


# ---------------------------------------------------------------------------
# get_current_user
# ---------------------------------------------------------------------------


class TestGetCurrentUser:
    """Tests for JWT-based viewer authentication."""

    def setup_method(self):
        self.db = AsyncMock()
        self.user_id = uuid.uuid4()
        self.valid_payload = {
            "sub": str(self.user_id),
            "email": "test@example.com",
            "user_metadata": {"full_name": "Test Viewer"},
        }
        self.credentials = MagicMock()
        self.credentials.credentials = "valid.jwt.token"

    @pytest.mark.asyncio
    async def test_raises_401_when_no_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials=None, db=self.db)
        assert exc_info.value.status_code == 401
        assert "Not authenticated" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_raises_401_when_key_never_matches(self):
        with (
            patch("app.api.deps.auth.get_jwks", new_callable=AsyncMock) as mock_jwks,
            patch("app.api.deps.auth.get_signing_key") as mock_get_key,
        ):
            mock_jwks.return_value = {"keys": []}
            mock_get_key.side_effect = ValueError("no key")

            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(credentials=self.credentials, db=self.db)

        assert exc_info.value.status_code == 401
        # Cached JWKS first, then one forced refresh
        assert mock_jwks.await_count == 2
        mock_jwks.assert_awaited_with(force_refresh=True)

    @pytest.mark.asyncio
    async def test_raises_401_when_sub_missing(self):
        with (
            patch("app.api.deps.auth.get_jwks", new_callable=AsyncMock) as mock_jwks,
            patch("app.api.deps.auth.get_signing_key") as mock_get_key,
            patch("app.api.deps.auth.jwt") as mock_jwt,
        ):
            mock_jwks.return_value = {"keys": [{"kid": "k1"}]}
            mock_get_key.return_value = MagicMock()
            mock_jwt.decode.return_value = {"email": "test@example.com"}  # no 'sub'

            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(credentials=self.credentials, db=self.db)

        assert exc_info.value.status_code == 401
        assert "Invalid authentication token" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_upserts_viewer_from_claims(self):
        viewer = make_mock_user(id=self.user_id)

        with (
            patch("app.api.deps.auth.get_jwks", new_callable=AsyncMock) as mock_jwks,
            patch("app.api.deps.auth.get_signing_key") as mock_get_key,
            patch("app.api.deps.auth.jwt") as mock_jwt,
            patch(
                "app.api.deps.auth.user_ops.upsert",
                new_callable=AsyncMock,
                return_value=viewer,
            ) as mock_upsert,
        ):
            mock_jwks.return_value = {"keys": []}
            mock_get_key.return_value = MagicMock()
            mock_jwt.decode.return_value = self.valid_payload

            result = await get_current_user(credentials=self.credentials, db=self.db)

        assert result is viewer
        mock_upsert.assert_awaited_once_with(self.db, self.user_id, self.valid_payload)


# ---------------------------------------------------------------------------
# get_current_user_optional
# ---------------------------------------------------------------------------


class TestGetCurrentUserOptional:
    @pytest.mark.asyncio
    async def test_returns_none_when_no_credentials(self):
        result = await get_current_user_optional(credentials=None, db=AsyncMock())
        assert result is None

    @pytest.mark.asyncio
    async def test_returns_none_on_auth_failure(self):
        credentials = MagicMock()
        credentials.credentials = "bad.jwt"

        with patch(
            "app.api.deps.auth.get_current_user",
            new_callable=AsyncMock,
            side_effect=HTTPException(status_code=401, detail="fail"),
        ):
            result = await get_current_user_optional(credentials=credentials, db=AsyncMock())
        assert result is None
