"""Ad impression model - append-only revenue events."""

import uuid as uuid_pkg
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, Index, Numeric, func
from sqlmodel import Field, SQLModel

from app.models.base import UUIDMixin, utcnow


class AdView(UUIDMixin, SQLModel, table=True):
    """One completed advertisement shown before playback."""

    __tablename__ = "ad_views"
    __table_args__ = (Index("ix_ad_views_viewed_at", "viewed_at"),)

    user_id: uuid_pkg.UUID | None = Field(default=None, foreign_key="users.id", index=True)
    movie_id: uuid_pkg.UUID | None = Field(default=None, foreign_key="movies.id")
    revenue: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    viewed_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
