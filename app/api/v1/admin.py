"""Admin API endpoints: platform stats, catalog management and premium codes."""

import logging
import uuid as uuid_pkg
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.deps import AdminUser, DbSession, require_admin
from app.config.premium import MAX_CODES_PER_BATCH, MIN_CODE_DURATION_DAYS
from app.core.exceptions import NotFoundError, ValidationError
from app.domain.analytics_operations import analytics_ops
from app.domain.movie_operations import movie_ops
from app.domain.premium_code_operations import premium_code_ops
from app.models.movie import Movie, MovieCreate, MovieRead, MovieUpdate
from app.models.premium_code import PremiumCode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ─────────────────────────────────────────────────────────────────────────────
# Request/Response Schemas
# ─────────────────────────────────────────────────────────────────────────────


class AdRevenue(BaseModel):
    total: Decimal
    this_month: Decimal


class StatsResponse(BaseModel):
    """Platform-wide counts for the admin dashboard."""

    users: int
    premium_users: int
    movies: int
    ad_revenue: AdRevenue


class PremiumCodeBatchRequest(BaseModel):
    duration_days: int = Field(ge=MIN_CODE_DURATION_DAYS)
    quantity: int = Field(default=1, ge=1, le=MAX_CODES_PER_BATCH)


class PremiumCodeRead(BaseModel):
    id: uuid_pkg.UUID
    code: str
    duration_days: int
    uses_left: int
    is_active: bool
    created_at: datetime
    used_at: datetime | None
    used_by: uuid_pkg.UUID | None


def _code_to_read(code: PremiumCode) -> PremiumCodeRead:
    return PremiumCodeRead(
        id=code.id,
        code=code.code,
        duration_days=code.duration_days,
        uses_left=code.uses_left,
        is_active=code.is_active,
        created_at=code.created_at,
        used_at=code.used_at,
        used_by=code.used_by,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Stats
# ─────────────────────────────────────────────────────────────────────────────


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: DbSession) -> StatsResponse:
    stats = await analytics_ops.get_stats(db)
    return StatsResponse(
        users=stats.users,
        premium_users=stats.premium_users,
        movies=stats.movies,
        ad_revenue=AdRevenue(
            total=stats.revenue.total,
            this_month=stats.revenue.this_month,
        ),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Catalog
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/movies", response_model=MovieRead, status_code=status.HTTP_201_CREATED)
async def create_movie(
    data: MovieCreate,
    current_user: AdminUser,
    db: DbSession,
) -> Movie:
    movie = await movie_ops.create(db, data.model_dump())
    logger.info(f"Admin {current_user.id} created movie {movie.id}")
    return movie


@router.put("/movies/{movie_id}", response_model=MovieRead)
async def update_movie(
    movie_id: uuid_pkg.UUID,
    data: MovieUpdate,
    db: DbSession,
) -> Movie:
    """Partial update: only the fields present in the body change."""
    movie = await movie_ops.get(db, movie_id)
    if not movie:
        raise NotFoundError("Movie")
    return await movie_ops.update(db, movie, data.model_dump(exclude_unset=True))


@router.delete("/movies/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movie(
    movie_id: uuid_pkg.UUID,
    current_user: AdminUser,
    db: DbSession,
) -> None:
    """Soft delete: the movie disappears from listings but its history stays."""
    deleted = await movie_ops.soft_delete(db, movie_id)
    if not deleted:
        raise NotFoundError("Movie")
    logger.info(f"Admin {current_user.id} deactivated movie {movie_id}")


# ─────────────────────────────────────────────────────────────────────────────
# Premium Codes
# ─────────────────────────────────────────────────────────────────────────────


@router.post(
    "/premium-codes",
    response_model=list[PremiumCodeRead],
    status_code=status.HTTP_201_CREATED,
)
async def generate_premium_codes(
    data: PremiumCodeBatchRequest,
    current_user: AdminUser,
    db: DbSession,
) -> list[PremiumCodeRead]:
    try:
        codes = await premium_code_ops.create_batch(db, data.duration_days, data.quantity)
    except ValueError as e:
        raise ValidationError(str(e)) from None
    logger.info(f"Admin {current_user.id} generated {len(codes)} premium codes")
    return [_code_to_read(code) for code in codes]


@router.get("/premium-codes", response_model=list[PremiumCodeRead])
async def list_premium_codes(db: DbSession) -> list[PremiumCodeRead]:
    codes = await premium_code_ops.list_codes(db)
    return [_code_to_read(code) for code in codes]
