"""Ad impression recording."""

import uuid as uuid_pkg
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.api.deps import CurrentUser, DbSession
from app.domain.ad_view_operations import ad_view_ops

router = APIRouter(prefix="/ads", tags=["ads"])


class AdViewCreate(BaseModel):
    movie_id: uuid_pkg.UUID | None = None


class AdViewRead(BaseModel):
    id: uuid_pkg.UUID
    movie_id: uuid_pkg.UUID | None
    revenue: Decimal
    viewed_at: datetime


@router.post("/view", response_model=AdViewRead, status_code=status.HTTP_201_CREATED)
async def record_ad_view(
    data: AdViewCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> AdViewRead:
    """Record one finished or skipped ad at the fixed per-view rate."""
    ad_view = await ad_view_ops.record(db, current_user.id, data.movie_id)
    return AdViewRead(
        id=ad_view.id,
        movie_id=ad_view.movie_id,
        revenue=ad_view.revenue,
        viewed_at=ad_view.viewed_at,
    )
