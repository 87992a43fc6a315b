"""Unit tests for the require_admin dependency."""

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from app.api.deps.admin import require_admin
from app.config import settings

from tests.helpers.mock_factories import make_mock_user


class TestRequireAdmin:
    @pytest.mark.asyncio
    async def test_admin_flag_passes(self):
        user = make_mock_user(is_admin=True)
        assert await require_admin(current_user=user) is user

    @pytest.mark.asyncio
    async def test_configured_admin_email_passes(self):
        user = make_mock_user(email="ops@streamhub.example")
        with patch.object(settings, "admin_emails", ["ops@streamhub.example"]):
            assert await require_admin(current_user=user) is user

    @pytest.mark.asyncio
    async def test_regular_viewer_gets_403(self):
        user = make_mock_user()
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(current_user=user)
        assert exc_info.value.status_code == 403
