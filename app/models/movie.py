"""Catalog item model."""

import uuid as uuid_pkg
from datetime import datetime

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, UUIDMixin


class MovieBase(SQLModel):
    """Fields an administrator can set."""

    title: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_type=Text)  # type: ignore[call-overload]
    thumbnail_url: str | None = Field(default=None, max_length=500)
    video_url: str | None = Field(default=None, max_length=500)
    duration: int | None = Field(default=None, ge=0, description="Length in minutes")
    year: int | None = Field(default=None)
    genres: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_premium: bool = Field(default=False)
    is_active: bool = Field(default=True)


class Movie(MovieBase, UUIDMixin, TimestampMixin, table=True):
    """
    A watchable catalog item.

    Soft-deleted by flipping is_active; inactive items are hidden from
    listings but kept for ad revenue attribution.
    """

    __tablename__ = "movies"

    view_count: int = Field(default=0, nullable=False)


class MovieCreate(MovieBase):
    """Schema for creating a movie."""


class MovieUpdate(SQLModel):
    """Schema for partially updating a movie."""

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    thumbnail_url: str | None = None
    video_url: str | None = None
    duration: int | None = Field(default=None, ge=0)
    year: int | None = None
    genres: list[str] | None = None
    is_premium: bool | None = None
    is_active: bool | None = None


class MovieRead(MovieBase):
    """Schema for catalog responses."""

    id: uuid_pkg.UUID
    view_count: int
    created_at: datetime
