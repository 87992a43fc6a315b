"""Root conftest: test infrastructure for all backend tests.

Provides:
- db_session fixture on a fresh in-memory SQLite database per test
- Viewer, admin, premium viewer and catalog fixtures
- API clients with dependency overrides (viewer, admin, premium, unauthenticated)
- Autouse mock for external services (Postmark, Stripe)
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  (registers tables on SQLModel.metadata)
from app.core.rate_limit import rate_limiter
from app.models.movie import Movie
from app.models.user import User

# ─────────────────────────────────────────────────────────────────────────────
# Database
# ─────────────────────────────────────────────────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Session on a brand-new in-memory database.

    StaticPool keeps the single connection alive for the whole test, so
    every statement sees the same database. Nothing outlives the test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


# ─────────────────────────────────────────────────────────────────────────────
# Domain Entity Fixtures
# ─────────────────────────────────────────────────────────────────────────────


async def _persist(db: AsyncSession, obj):
    db.add(obj)
    await db.flush()
    await db.refresh(obj)
    return obj


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A free-tier viewer."""
    return await _persist(
        db_session,
        User(
            id=uuid.uuid4(),
            email=f"viewer-{uuid.uuid4().hex[:8]}@example.com",
            first_name="Test",
            last_name="Viewer",
        ),
    )


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _persist(
        db_session,
        User(
            id=uuid.uuid4(),
            email=f"admin-{uuid.uuid4().hex[:8]}@example.com",
            is_admin=True,
        ),
    )


@pytest.fixture
async def premium_user(db_session: AsyncSession) -> User:
    """A viewer whose premium runs for another 30 days."""
    return await _persist(
        db_session,
        User(
            id=uuid.uuid4(),
            email=f"premium-{uuid.uuid4().hex[:8]}@example.com",
            is_premium=True,
            premium_expires_at=datetime.now(UTC) + timedelta(days=30),
        ),
    )


@pytest.fixture
async def test_movie(db_session: AsyncSession) -> Movie:
    """A free catalog item."""
    return await _persist(
        db_session,
        Movie(
            title="Free Feature",
            description="Watchable by everyone",
            duration=95,
            year=2021,
            genres=["action", "comedy"],
        ),
    )


@pytest.fixture
async def premium_movie(db_session: AsyncSession) -> Movie:
    """A premium-only catalog item."""
    return await _persist(
        db_session,
        Movie(
            title="Premium Feature",
            duration=120,
            year=2024,
            genres=["drama"],
            is_premium=True,
        ),
    )


# ─────────────────────────────────────────────────────────────────────────────
# API Clients
# ─────────────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def _client(db_session: AsyncSession, user: User | None) -> AsyncIterator[AsyncClient]:
    """HTTP client that uses the test session and, if given, bypasses JWT auth."""
    from app.api.deps.auth import get_current_user
    from app.core.database import get_db
    from app.main import app

    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user

    async def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def api_client(db_session: AsyncSession, test_user: User):
    """Client authenticated as the free-tier test_user."""
    async with _client(db_session, test_user) as client:
        yield client


@pytest.fixture
async def premium_client(db_session: AsyncSession, premium_user: User):
    async with _client(db_session, premium_user) as client:
        yield client


@pytest.fixture
async def admin_client(db_session: AsyncSession, admin_user: User):
    async with _client(db_session, admin_user) as client:
        yield client


@pytest.fixture
async def unauth_client(db_session: AsyncSession):
    """Client with no Authorization header; the real auth dependency runs."""
    async with _client(db_session, None) as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# External Service Mocks and Global State
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def mock_external_services():
    """SAFETY: Always mock external services.

    Prevents accidental email sends or Stripe charges. Patched where the
    routers look the services up.
    """
    with (
        patch("app.api.v1.users.postmark_service", new_callable=MagicMock) as mock_pm,
        patch("app.api.v1.billing.stripe_service", new_callable=MagicMock) as mock_stripe,
    ):
        mock_pm.send = AsyncMock(return_value=True)
        mock_pm.send_email_verification = AsyncMock(return_value=True)
        mock_stripe.construct_webhook_event = MagicMock(
            side_effect=ValueError("Invalid webhook signature")
        )

        yield {"postmark": mock_pm, "stripe": mock_stripe}


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()
