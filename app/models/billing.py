"""Billing models - Stripe webhook audit log."""

import uuid as uuid_pkg
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column, DateTime, String, func
from sqlmodel import Field, SQLModel

from app.models.base import UUIDMixin, utcnow


class BillingEventType(str, Enum):
    """Types of billing events for audit logging."""

    SUBSCRIPTION_CREATED = "subscription.created"
    PAYMENT_SUCCEEDED = "payment.succeeded"
    SUBSCRIPTION_CANCELED = "subscription.canceled"
    PREMIUM_GRANTED = "premium.granted"
    PREMIUM_REVOKED = "premium.revoked"


class BillingEvent(UUIDMixin, SQLModel, table=True):
    """
    Billing event audit log.

    One row per processed Stripe webhook (keyed by stripe_event_id for
    idempotency) and per locally initiated subscription change.
    """

    __tablename__ = "billing_events"

    user_id: uuid_pkg.UUID | None = Field(default=None, foreign_key="users.id", index=True)
    event_type: str = Field(
        sa_column=Column(String(50), nullable=False, index=True),
    )
    description: str | None = Field(default=None, max_length=500)
    payload: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    stripe_event_id: str | None = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, unique=True, index=True),
    )
    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
