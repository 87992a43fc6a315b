"""Entitlement operations - who may watch premium content right now.

Premium is a flag plus an optional expiry on the viewer record. Expiry is
enforced lazily: a stale flag is cleared the next time it is read rather
than by a background sweep. A null expiry never lapses.
"""

import logging
import uuid as uuid_pkg
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.config.premium import OVERRIDE_PREMIUM_EXPIRY
from app.domain.user_operations import user_ops
from app.models.base import ensure_aware, utcnow
from app.models.user import User

logger = logging.getLogger(__name__)


def premium_lapsed(user: User, now: datetime) -> bool:
    """True when the viewer is flagged premium but the expiry has passed."""
    expires_at = ensure_aware(user.premium_expires_at)
    return bool(user.is_premium and expires_at is not None and now > expires_at)


def is_effective_admin(user: User) -> bool:
    """Admin flag, or an email listed in ADMIN_EMAILS."""
    if user.is_admin:
        return True
    if not user.email:
        return False
    admin_emails = {email.lower() for email in settings.admin_emails}
    return user.email.lower() in admin_emails


class EntitlementOperations:
    """Reads and writes of the viewer's premium entitlement."""

    async def refresh(
        self,
        db: AsyncSession,
        user: User,
        now: datetime | None = None,
    ) -> User:
        """Correct a lapsed premium flag on a loaded viewer and return it re-read."""
        if not premium_lapsed(user, now or utcnow()):
            return user

        user.is_premium = False
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Premium expired for viewer {user.id}")
        return user

    async def has_premium(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
        now: datetime | None = None,
    ) -> bool:
        """Whether the viewer currently has unrestricted access."""
        user = await user_ops.get_by_id(db, user_id)
        if user is None:
            return False
        user = await self.refresh(db, user, now)
        return user.is_premium

    async def grant_premium(
        self,
        db: AsyncSession,
        user: User,
        expires_at: datetime | None,
    ) -> User:
        """Grant premium until expires_at, replacing any previous expiry."""
        user.is_premium = True
        user.premium_expires_at = expires_at
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Granted premium to viewer {user.id} until {expires_at}")
        return user

    async def revoke_premium(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
        now: datetime | None = None,
    ) -> User | None:
        """
        Revoke premium for a viewer effective now.

        Entry point for billing sync (subscription cancelled upstream).
        Returns the updated viewer, or None if the viewer does not exist.
        """
        user = await user_ops.get_by_id(db, user_id)
        if user is None:
            return None

        user.is_premium = False
        user.premium_expires_at = now or utcnow()
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Revoked premium for viewer {user_id}")
        return user

    async def grant_admin(self, db: AsyncSession, user: User) -> User:
        """Set the admin flag. The application never clears it."""
        if user.is_admin:
            return user
        user.is_admin = True
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.warning(f"Granted admin to viewer {user.id}")
        return user

    async def apply_override(self, db: AsyncSession, user: User) -> User:
        """Admin rights plus premium that runs until the override expiry."""
        user = await self.grant_admin(db, user)
        return await self.grant_premium(db, user, OVERRIDE_PREMIUM_EXPIRY)


entitlement_ops = EntitlementOperations()
