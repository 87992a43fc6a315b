"""Every viewer endpoint rejects anonymous callers."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.helpers.auth_assertions import assert_requires_auth

MOVIE_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,url,kwargs",
    [
        ("get", "/api/v1/users/me", {}),
        ("put", "/api/v1/users/me/profile", {"json": {"bio": "hi"}}),
        ("post", "/api/v1/users/me/email-change", {"json": {"new_email": "a@example.com"}}),
        ("post", f"/api/v1/movies/{MOVIE_ID}/watch", {}),
        ("post", "/api/v1/ads/view", {"json": {"movie_id": MOVIE_ID}}),
        ("post", "/api/v1/premium-codes/redeem", {"json": {"code": "ABCD1234"}}),
        ("post", "/api/v1/auth/2fa/setup", {}),
        ("post", "/api/v1/auth/2fa/verify", {"json": {"token": "123456"}}),
        ("post", "/api/v1/billing/subscription", {}),
        ("get", "/api/v1/admin/stats", {}),
    ],
)
async def test_requires_auth(unauth_client: AsyncClient, method, url, kwargs):
    await assert_requires_auth(unauth_client, method, url, **kwargs)


@pytest.mark.asyncio
async def test_health_is_public(unauth_client: AsyncClient):
    resp = await unauth_client.get("/health")
    assert resp.status_code == 200
