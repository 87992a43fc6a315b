"""Premium code model - single-use promotional codes and their consumption."""

import uuid as uuid_pkg
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, String, func
from sqlmodel import Field, SQLModel

from app.models.base import UUIDMixin, utcnow


class PremiumCode(UUIDMixin, SQLModel, table=True):
    """
    A redeemable premium code.

    Batch-created by administrators. Each successful redemption decrements
    uses_left; the code deactivates when uses_left reaches zero. used_by and
    used_at record the most recent redeemer.
    """

    __tablename__ = "premium_codes"
    __table_args__ = (CheckConstraint("uses_left >= 0", name="ck_premium_codes_uses_left"),)

    code: str = Field(
        sa_column=Column(String(32), nullable=False, unique=True, index=True),
    )
    duration_days: int = Field(nullable=False)
    uses_left: int = Field(default=1, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
    used_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )
    used_by: uuid_pkg.UUID | None = Field(default=None, foreign_key="users.id")
