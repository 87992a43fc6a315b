"""Billing API endpoints for the premium subscription via Stripe."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from stripe import StripeError

from app.api.deps import CurrentUser, DbSession
from app.config import settings
from app.config.premium import PREMIUM_PERIOD_FALLBACK
from app.core.exceptions import UpstreamError
from app.domain.billing_operations import billing_ops
from app.domain.entitlement_operations import entitlement_ops
from app.domain.user_operations import user_ops
from app.models.billing import BillingEventType
from app.services.stripe_service import stripe_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])


# ─────────────────────────────────────────────────────────────────────────────
# Request/Response Schemas
# ─────────────────────────────────────────────────────────────────────────────


class SubscriptionResponse(BaseModel):
    """What the client needs to confirm the subscription's first payment."""

    subscription_id: str
    client_secret: str | None


# ─────────────────────────────────────────────────────────────────────────────
# Subscription
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/subscription", response_model=SubscriptionResponse)
async def create_subscription(
    current_user: CurrentUser,
    db: DbSession,
) -> SubscriptionResponse:
    """
    Create the viewer's premium subscription, or resume the pending one.

    Premium is granted by the payment webhook, not here.
    """
    if not settings.stripe_enabled:
        raise HTTPException(400, "Payments not configured")

    try:
        intent = stripe_service.create_or_resume_subscription(current_user)
    except StripeError:
        raise UpstreamError("Payment provider") from None

    if (
        current_user.stripe_customer_id != intent.customer_id
        or current_user.stripe_subscription_id != intent.subscription_id
    ):
        await user_ops.set_stripe_info(
            db, current_user, intent.customer_id, intent.subscription_id
        )
        await billing_ops.log_event(
            db,
            event_type=BillingEventType.SUBSCRIPTION_CREATED,
            user_id=current_user.id,
            description=f"Subscription {intent.subscription_id} created",
        )

    return SubscriptionResponse(
        subscription_id=intent.subscription_id,
        client_secret=intent.client_secret,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Webhook Handler
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/webhooks/stripe")
async def handle_stripe_webhook(
    request: Request,
    db: DbSession,
) -> dict[str, str]:
    """
    Handle Stripe webhook events.

    Verifies the webhook signature before processing.
    No authentication required (verified by Stripe signature).
    Each event is processed at most once, keyed by its Stripe event ID.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    # Verify signature
    try:
        event = stripe_service.construct_webhook_event(payload, sig_header)
    except ValueError:
        raise HTTPException(400, "Invalid webhook signature") from None

    event_type = str(event.get("type", ""))
    event_id = str(event.get("id", ""))
    data = event.get("data", {})
    obj = data.get("object", {}) if isinstance(data, dict) else {}

    logger.info(f"Received Stripe webhook: {event_type} ({event_id})")

    # Check for duplicate (idempotency)
    if await billing_ops.is_processed(db, event_id):
        logger.info(f"Skipping duplicate webhook: {event_id}")
        return {"status": "already_processed"}

    # Route to handler
    if event_type == "invoice.payment_succeeded":
        await _handle_payment_succeeded(db, obj, event_id)
    elif event_type == "customer.subscription.deleted":
        await _handle_subscription_deleted(db, obj, event_id)
    else:
        logger.debug(f"Unhandled webhook event type: {event_type}")

    return {"status": "ok"}


# ─────────────────────────────────────────────────────────────────────────────
# Webhook Handlers
# ─────────────────────────────────────────────────────────────────────────────


def _period_end(invoice: dict[str, Any]) -> datetime | None:
    """End of the billing period an invoice pays for."""
    lines = invoice.get("lines", {}).get("data", [])
    timestamp = None
    if lines:
        timestamp = lines[0].get("period", {}).get("end")
    timestamp = timestamp or invoice.get("period_end")
    if not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=UTC)


async def _handle_payment_succeeded(
    db: DbSession,
    invoice: dict[str, Any],
    event_id: str,
) -> None:
    """Handle a paid invoice - grant premium until the paid period ends."""
    customer_id = invoice.get("customer", "")
    user = await user_ops.get_by_stripe_customer(db, customer_id)
    if not user:
        logger.warning(f"No viewer found for Stripe customer {customer_id}")
        return

    expires_at = _period_end(invoice)
    if expires_at is None:
        # Never grant open-ended premium from a payment
        logger.warning(f"Invoice {invoice.get('id')} has no billing period, granting one interval")
        expires_at = datetime.now(UTC) + PREMIUM_PERIOD_FALLBACK
    await entitlement_ops.grant_premium(db, user, expires_at)

    await billing_ops.log_event(
        db,
        event_type=BillingEventType.PAYMENT_SUCCEEDED,
        user_id=user.id,
        payload={
            "invoice_id": invoice.get("id"),
            "amount_paid": invoice.get("amount_paid"),
            "premium_expires_at": expires_at.isoformat(),
        },
        stripe_event_id=event_id,
        description="Invoice paid, premium granted",
    )


async def _handle_subscription_deleted(
    db: DbSession,
    stripe_sub: dict[str, Any],
    event_id: str,
) -> None:
    """
    Handle subscription deletion - revoke premium effective now.

    This webhook fires when the subscription actually ends, not when the
    viewer asks to cancel.
    """
    customer_id = stripe_sub.get("customer", "")
    user = await user_ops.get_by_stripe_customer(db, customer_id)
    if not user:
        logger.warning(f"No viewer found for deleted Stripe customer {customer_id}")
        return

    await entitlement_ops.revoke_premium(db, user.id)
    user.stripe_subscription_id = None
    db.add(user)

    await billing_ops.log_event(
        db,
        event_type=BillingEventType.SUBSCRIPTION_CANCELED,
        user_id=user.id,
        payload={"subscription_id": stripe_sub.get("id")},
        stripe_event_id=event_id,
        description="Subscription ended, premium revoked",
    )
