"""Domain operations for premium codes (the redemption ledger)."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.config.premium import MAX_CODES_PER_BATCH, MIN_CODE_DURATION_DAYS
from app.core.security import codes_match, generate_premium_code
from app.domain.base_operations import BaseOperations
from app.domain.entitlement_operations import entitlement_ops
from app.models.base import utcnow
from app.models.premium_code import PremiumCode
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class RedemptionResult:
    """Outcome of a successful redemption."""

    expires_at: datetime | None
    is_override: bool
    code: PremiumCode | None = None


def normalize_code(code: str) -> str:
    return code.strip().upper()


class PremiumCodeOperations(BaseOperations[PremiumCode]):
    """CRUD operations and redemption policy for PremiumCode model."""

    def __init__(self) -> None:
        super().__init__(PremiumCode)

    async def get_by_code(self, db: AsyncSession, code: str) -> PremiumCode | None:
        """Get a premium code by its code string (case-insensitive)."""
        statement = (
            select(PremiumCode)
            .where(PremiumCode.code == normalize_code(code))  # type: ignore[arg-type]
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def list_codes(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 500,
    ) -> list[PremiumCode]:
        """All codes, newest first."""
        statement = (
            select(PremiumCode)
            .order_by(PremiumCode.created_at.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def create_batch(
        self,
        db: AsyncSession,
        duration_days: int,
        quantity: int,
    ) -> list[PremiumCode]:
        """
        Generate `quantity` single-use codes granting `duration_days` of premium.

        Codes are distinct within the batch. They are not re-checked against
        existing codes; a collision surfaces as a unique-constraint error.

        Raises ValueError if duration or quantity are out of range.
        """
        if duration_days < MIN_CODE_DURATION_DAYS:
            raise ValueError(f"Duration must be at least {MIN_CODE_DURATION_DAYS} day(s)")
        if not 1 <= quantity <= MAX_CODES_PER_BATCH:
            raise ValueError(f"Quantity must be between 1 and {MAX_CODES_PER_BATCH}")

        batch: dict[str, PremiumCode] = {}
        while len(batch) < quantity:
            code = generate_premium_code()
            if code in batch:
                continue
            batch[code] = PremiumCode(code=code, duration_days=duration_days, uses_left=1)

        codes = list(batch.values())
        db.add_all(codes)
        await db.flush()
        for premium_code in codes:
            await db.refresh(premium_code)

        logger.info(f"Generated {quantity} premium codes ({duration_days} days)")
        return codes

    async def consume(
        self,
        db: AsyncSession,
        code: str,
        user_id,
        now: datetime,
    ) -> PremiumCode | None:
        """
        Atomically take one use of a code.

        A single conditional UPDATE decrements uses_left only while the code
        is active with uses remaining, so concurrent redemptions of a
        single-use code cannot both succeed. Returns the updated code, or
        None if nothing matched (absent, exhausted or inactive).
        """
        normalized = normalize_code(code)
        statement = (
            update(PremiumCode)
            .where(
                PremiumCode.code == normalized,  # type: ignore[arg-type]
                PremiumCode.uses_left > 0,  # type: ignore[operator]
                PremiumCode.is_active.is_(True),  # type: ignore[attr-defined]
            )
            .values(
                uses_left=PremiumCode.uses_left - 1,
                is_active=case((PremiumCode.uses_left > 1, True), else_=False),  # type: ignore[operator]
                used_at=now,
                used_by=user_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(statement)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None

        return await self.get_by_code(db, normalized)

    async def redeem(
        self,
        db: AsyncSession,
        code: str,
        user: User,
        now: datetime | None = None,
    ) -> RedemptionResult:
        """
        Redeem a code for a viewer.

        The configured override token grants admin and long-lived premium
        without touching the ledger. Any other code must be active with uses
        remaining; premium then runs for the code's duration from now,
        replacing any existing expiry.

        Raises ValueError if the code is invalid or exhausted.
        """
        if settings.admin_override_enabled and codes_match(code, settings.admin_override_code):
            user = await entitlement_ops.apply_override(db, user)
            logger.warning(f"Admin override code redeemed by viewer {user.id}")
            return RedemptionResult(expires_at=user.premium_expires_at, is_override=True)

        now = now or utcnow()
        premium_code = await self.consume(db, code, user.id, now)
        if premium_code is None:
            raise ValueError("Invalid or expired code")

        expires_at = now + timedelta(days=premium_code.duration_days)
        await entitlement_ops.grant_premium(db, user, expires_at)

        logger.info(
            f"Viewer {user.id} redeemed premium code {premium_code.code} "
            f"({premium_code.uses_left} uses left)"
        )
        return RedemptionResult(expires_at=expires_at, is_override=False, code=premium_code)


premium_code_ops = PremiumCodeOperations()
