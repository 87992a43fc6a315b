"""Domain operations for ad impressions and ad revenue."""

import logging
import uuid as uuid_pkg
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.premium import AD_POLICY
from app.models.ad_view import AdView
from app.models.base import utcnow

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass
class RevenueTotals:
    total: Decimal
    this_month: Decimal


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _as_decimal(value: object) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


class AdViewOperations:
    """Append-only recording and aggregation of ad impressions."""

    async def record(
        self,
        db: AsyncSession,
        user_id: uuid_pkg.UUID,
        movie_id: uuid_pkg.UUID | None,
    ) -> AdView:
        """Record one completed ad at the current per-view rate."""
        ad_view = AdView(
            user_id=user_id,
            movie_id=movie_id,
            revenue=AD_POLICY.revenue_per_view,
        )
        db.add(ad_view)
        await db.flush()
        await db.refresh(ad_view)
        logger.info(f"Recorded ad view for viewer {user_id} on movie {movie_id}")
        return ad_view

    async def revenue_totals(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> RevenueTotals:
        """All-time ad revenue and revenue since the start of the current month (UTC)."""
        now = now or utcnow()
        total_stmt = select(func.coalesce(func.sum(AdView.revenue), 0))
        month_stmt = total_stmt.where(AdView.viewed_at >= month_start(now))  # type: ignore[operator]

        total = (await db.execute(total_stmt)).scalar()
        this_month = (await db.execute(month_stmt)).scalar()
        return RevenueTotals(total=_as_decimal(total), this_month=_as_decimal(this_month))


ad_view_ops = AdViewOperations()
