"""Entitlement reads and writes against a real database."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entitlement_operations import entitlement_ops
from app.models.base import ensure_aware
from app.models.user import User


class TestLazyExpiry:
    async def test_lapsed_premium_is_corrected_and_persisted(
        self, db_session: AsyncSession, test_user
    ):
        expired_at = datetime.now(UTC) - timedelta(days=1)
        test_user.is_premium = True
        test_user.premium_expires_at = expired_at
        await db_session.flush()

        assert await entitlement_ops.has_premium(db_session, test_user.id) is False

        db_session.expunge_all()
        row = (
            await db_session.execute(select(User).where(User.id == test_user.id))
        ).scalar_one()
        assert row.is_premium is False
        assert ensure_aware(row.premium_expires_at) == expired_at

    async def test_active_premium_reads_true(self, db_session: AsyncSession, premium_user):
        assert await entitlement_ops.has_premium(db_session, premium_user.id) is True

    async def test_unknown_viewer_reads_false(self, db_session: AsyncSession):
        assert await entitlement_ops.has_premium(db_session, uuid.uuid4()) is False


class TestRevoke:
    async def test_revoke_takes_effect_immediately(self, db_session: AsyncSession, premium_user):
        now = datetime.now(UTC)

        await entitlement_ops.revoke_premium(db_session, premium_user.id, now=now)

        assert await entitlement_ops.has_premium(db_session, premium_user.id) is False
        assert ensure_aware(premium_user.premium_expires_at) == now

    async def test_admin_flag_survives_revocation(self, db_session: AsyncSession, admin_user):
        await entitlement_ops.grant_premium(db_session, admin_user, None)
        await entitlement_ops.revoke_premium(db_session, admin_user.id)

        assert admin_user.is_admin is True
        assert admin_user.is_premium is False
