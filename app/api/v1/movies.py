"""Catalog browsing and the watch entry point."""

import logging
import uuid as uuid_pkg

from fastapi import APIRouter
from pydantic import BaseModel

from app.api.deps import CurrentUser, DbSession
from app.core.exceptions import ForbiddenError, NotFoundError
from app.domain.entitlement_operations import entitlement_ops
from app.domain.movie_operations import movie_ops
from app.models.movie import Movie, MovieRead
from app.services.playback_gate import GateState, PlaybackGate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["movies"])


class WatchResponse(BaseModel):
    """Playback authorization for one viewing session."""

    movie: MovieRead
    requires_ads: bool
    ads_count: int
    gate_state: GateState


@router.get("", response_model=list[MovieRead])
async def list_movies(
    db: DbSession,
    category: str | None = None,
) -> list[Movie]:
    """Active catalog, newest first. `category=all` or no category means everything."""
    return await movie_ops.list_active(db, category)


@router.get("/{movie_id}", response_model=MovieRead)
async def get_movie(
    movie_id: uuid_pkg.UUID,
    db: DbSession,
) -> Movie:
    movie = await movie_ops.get_active(db, movie_id)
    if not movie:
        raise NotFoundError("Movie")
    return movie


@router.post("/{movie_id}/watch", response_model=WatchResponse)
async def watch_movie(
    movie_id: uuid_pkg.UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> WatchResponse:
    """
    Start a viewing session.

    Premium-only titles are refused to viewers without an active
    entitlement. Premium viewers skip ads; everyone else gets the
    session's ad count.
    """
    movie = await movie_ops.get_active(db, movie_id)
    if not movie:
        raise NotFoundError("Movie")

    is_premium = await entitlement_ops.has_premium(db, current_user.id)
    if movie.is_premium and not is_premium:
        raise ForbiddenError("Premium subscription required")

    await movie_ops.increment_views(db, movie.id)
    await db.refresh(movie)

    gate = PlaybackGate()
    gate.begin(is_premium)
    return WatchResponse(
        movie=MovieRead.model_validate(movie),
        requires_ads=not gate.is_playable,
        ads_count=gate.ads_remaining,
        gate_state=gate.state,
    )
