"""Aggregate counts for the admin dashboard."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.ad_view_operations import RevenueTotals, ad_view_ops
from app.domain.movie_operations import movie_ops
from app.models.base import utcnow
from app.models.user import User


@dataclass
class PlatformStats:
    users: int
    premium_users: int
    movies: int
    revenue: RevenueTotals


class AnalyticsOperations:
    async def user_count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(User))
        return int(result.scalar() or 0)

    async def premium_user_count(self, db: AsyncSession, now: datetime) -> int:
        """Viewers whose premium has not lapsed, whether or not the flag was corrected yet."""
        statement = (
            select(func.count())
            .select_from(User)
            .where(
                User.is_premium.is_(True),  # type: ignore[attr-defined]
                or_(
                    User.premium_expires_at.is_(None),  # type: ignore[union-attr]
                    User.premium_expires_at >= now,  # type: ignore[operator]
                ),
            )
        )
        result = await db.execute(statement)
        return int(result.scalar() or 0)

    async def get_stats(self, db: AsyncSession, now: datetime | None = None) -> PlatformStats:
        now = now or utcnow()
        return PlatformStats(
            users=await self.user_count(db),
            premium_users=await self.premium_user_count(db, now),
            movies=await movie_ops.count_active(db),
            revenue=await ad_view_ops.revenue_totals(db, now),
        )


analytics_ops = AnalyticsOperations()
