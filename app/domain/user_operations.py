"""Viewer accounts: first sign-in, settings record, email change, 2FA and Stripe ids."""

import logging
import uuid as uuid_pkg
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.premium import EMAIL_VERIFICATION_TTL
from app.core.security import generate_verification_token
from app.models.base import ensure_aware, utcnow
from app.models.user import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "bio", "theme", "accent_color")


class UserOperations:
    """Operations for User model."""

    async def get_by_id(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
    ) -> User | None:
        """Get a user by ID."""
        statement = select(User).where(User.id == user_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """Case-insensitive lookup; the identity provider may store mixed case."""
        statement = select(User).where(func.lower(User.email) == email.lower())
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_stripe_customer(self, db: AsyncSession, customer_id: str) -> User | None:
        statement = select(User).where(User.stripe_customer_id == customer_id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_verification_token(self, db: AsyncSession, token: str) -> User | None:
        statement = select(User).where(User.email_verification_token == token)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
        claims: dict[str, Any],
    ) -> User:
        """
        Get the viewer for an authenticated identity, creating it on first sign-in.

        Identity fields (names, avatar) are refreshed from the token claims
        only when the record is created; later edits belong to the viewer.
        """
        user = await self.get_by_id(db, user_id)
        if user:
            return user

        user_metadata = claims.get("user_metadata", {}) or {}
        full_name = user_metadata.get("full_name") or user_metadata.get("name") or ""
        first_name, _, last_name = full_name.partition(" ")

        user = User(
            id=user_id,
            email=claims.get("email"),
            first_name=first_name or None,
            last_name=last_name or None,
            profile_image_url=user_metadata.get("avatar_url"),
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Created viewer {user_id} on first sign-in")
        return user

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        obj_in: dict,
    ) -> User:
        """Update the viewer's settings record. Unknown keys and None values are ignored."""
        for field, value in obj_in.items():
            if value is not None and field in PROFILE_FIELDS:
                setattr(user, field, getattr(value, "value", value))
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def initiate_email_change(
        self,
        db: AsyncSession,
        user: User,
        new_email: str,
        now: datetime | None = None,
    ) -> str:
        """
        Start an email change and return the verification token.

        Raises ValueError if another account already uses the address.
        """
        existing = await self.get_by_email(db, new_email)
        if existing and existing.id != user.id:
            raise ValueError("Email is already in use")

        now = now or utcnow()
        token = generate_verification_token()
        user.pending_email = new_email
        user.email_verification_token = token
        user.email_verification_expires = now + EMAIL_VERIFICATION_TTL
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return token

    async def confirm_email_change(
        self,
        db: AsyncSession,
        token: str,
        now: datetime | None = None,
    ) -> User | None:
        """
        Apply a pending email change. Returns None for unknown or expired tokens.

        Raises ValueError if another account took the address after the
        change was requested.
        """
        user = await self.get_by_verification_token(db, token)
        if not user or not user.pending_email:
            return None

        expires = ensure_aware(user.email_verification_expires)
        if expires is None or (now or utcnow()) > expires:
            return None

        owner = await self.get_by_email(db, user.pending_email)
        if owner and owner.id != user.id:
            raise ValueError("Email is already in use")

        user.email = user.pending_email
        user.pending_email = None
        user.email_verification_token = None
        user.email_verification_expires = None
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Viewer {user.id} confirmed email change")
        return user

    async def set_two_factor(
        self,
        db: AsyncSession,
        user: User,
        secret: str | None,
        enabled: bool,
    ) -> User:
        user.two_factor_secret = secret
        user.two_factor_enabled = enabled
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def set_stripe_info(
        self,
        db: AsyncSession,
        user: User,
        customer_id: str,
        subscription_id: str | None = None,
    ) -> User:
        user.stripe_customer_id = customer_id
        user.stripe_subscription_id = subscription_id
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user


user_ops = UserOperations()
