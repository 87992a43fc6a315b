"""Domain operations for the billing event log."""

import uuid as uuid_pkg
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.billing import BillingEvent, BillingEventType


class BillingOperations:
    """Audit trail of subscription activity and processed Stripe webhooks."""

    async def log_event(
        self,
        db: AsyncSession,
        event_type: BillingEventType,
        user_id: uuid_pkg.UUID | None = None,
        description: str | None = None,
        payload: dict[str, Any] | None = None,
        stripe_event_id: str | None = None,
    ) -> BillingEvent:
        """Log a billing event for audit trail."""
        event = BillingEvent(
            user_id=user_id,
            event_type=event_type.value,
            description=description,
            payload=payload,
            stripe_event_id=stripe_event_id,
        )
        db.add(event)
        await db.flush()
        return event

    async def is_processed(self, db: AsyncSession, stripe_event_id: str) -> bool:
        """Whether a Stripe webhook event has already been handled."""
        statement = select(BillingEvent.id).where(
            BillingEvent.stripe_event_id == stripe_event_id  # type: ignore[arg-type]
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none() is not None


billing_ops = BillingOperations()
