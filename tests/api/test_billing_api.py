"""Premium subscription and Stripe webhook endpoint tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
import stripe
from httpx import AsyncClient
from sqlmodel import select

from app.config import settings
from app.models.base import ensure_aware
from app.models.billing import BillingEvent, BillingEventType
from app.services.stripe_service import SubscriptionIntent


# ─────────────────────────────────────────────────────────────────────────────
# Subscription
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_subscription(
    api_client: AsyncClient, test_user, db_session, mock_external_services
):
    mock_stripe = mock_external_services["stripe"]
    mock_stripe.create_or_resume_subscription.return_value = SubscriptionIntent(
        subscription_id="sub_123",
        client_secret="pi_secret_abc",
        customer_id="cus_123",
    )

    with patch.object(settings, "stripe_secret_key", "sk_test_123"):
        resp = await api_client.post("/api/v1/billing/subscription")

    assert resp.status_code == 200
    assert resp.json() == {"subscription_id": "sub_123", "client_secret": "pi_secret_abc"}
    assert test_user.stripe_customer_id == "cus_123"
    assert test_user.stripe_subscription_id == "sub_123"
    # Premium arrives with the paid invoice, not with the subscription
    assert test_user.is_premium is False

    events = (await db_session.execute(select(BillingEvent))).scalars().all()
    assert [e.event_type for e in events] == [BillingEventType.SUBSCRIPTION_CREATED]


@pytest.mark.asyncio
async def test_create_subscription_requires_stripe(api_client: AsyncClient):
    with patch.object(settings, "stripe_secret_key", ""):
        resp = await api_client.post("/api/v1/billing/subscription")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_subscription_provider_failure(
    api_client: AsyncClient, mock_external_services
):
    mock_external_services["stripe"].create_or_resume_subscription.side_effect = (
        stripe.StripeError("card network down")
    )

    with patch.object(settings, "stripe_secret_key", "sk_test_123"):
        resp = await api_client.post("/api/v1/billing/subscription")

    assert resp.status_code == 502


# ─────────────────────────────────────────────────────────────────────────────
# Webhook
# ─────────────────────────────────────────────────────────────────────────────


def _accept(mock_external_services, event: dict) -> None:
    construct = mock_external_services["stripe"].construct_webhook_event
    construct.side_effect = None
    construct.return_value = event


def _paid_invoice_event(event_id: str, customer_id: str, period_end: datetime) -> dict:
    return {
        "id": event_id,
        "type": "invoice.payment_succeeded",
        "data": {
            "object": {
                "id": "in_1",
                "customer": customer_id,
                "amount_paid": 1999,
                "lines": {"data": [{"period": {"end": int(period_end.timestamp())}}]},
            }
        },
    }


@pytest.fixture
async def stripe_customer(db_session, test_user):
    test_user.stripe_customer_id = "cus_live"
    test_user.stripe_subscription_id = "sub_live"
    await db_session.flush()
    return test_user


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(unauth_client: AsyncClient):
    resp = await unauth_client.post(
        "/api/v1/billing/webhooks/stripe",
        content=b"{}",
        headers={"stripe-signature": "t=1,v1=bogus"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_payment_succeeded_grants_premium_until_period_end(
    unauth_client: AsyncClient, stripe_customer, db_session, mock_external_services
):
    period_end = (datetime.now(UTC) + timedelta(days=30)).replace(microsecond=0)
    _accept(mock_external_services, _paid_invoice_event("evt_1", "cus_live", period_end))

    resp = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert stripe_customer.is_premium is True
    assert ensure_aware(stripe_customer.premium_expires_at) == period_end


@pytest.mark.asyncio
async def test_payment_without_billing_period_grants_one_interval(
    unauth_client: AsyncClient, stripe_customer, mock_external_services
):
    _accept(
        mock_external_services,
        {
            "id": "evt_noperiod",
            "type": "invoice.payment_succeeded",
            "data": {"object": {"id": "in_2", "customer": "cus_live", "lines": {"data": []}}},
        },
    )
    before = datetime.now(UTC)

    resp = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert resp.status_code == 200
    assert stripe_customer.is_premium is True
    expires_at = ensure_aware(stripe_customer.premium_expires_at)
    assert expires_at is not None
    assert before + timedelta(days=30) < expires_at <= datetime.now(UTC) + timedelta(days=31)


@pytest.mark.asyncio
async def test_duplicate_event_is_processed_once(
    unauth_client: AsyncClient, stripe_customer, db_session, mock_external_services
):
    period_end = datetime.now(UTC) + timedelta(days=30)
    _accept(mock_external_services, _paid_invoice_event("evt_dup", "cus_live", period_end))

    first = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")
    second = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert first.json() == {"status": "ok"}
    assert second.json() == {"status": "already_processed"}
    events = (
        (
            await db_session.execute(
                select(BillingEvent).where(BillingEvent.stripe_event_id == "evt_dup")
            )
        )
        .scalars()
        .all()
    )
    assert len(events) == 1


@pytest.mark.asyncio
async def test_payment_for_unknown_customer_is_ignored(
    unauth_client: AsyncClient, test_user, mock_external_services
):
    period_end = datetime.now(UTC) + timedelta(days=30)
    _accept(mock_external_services, _paid_invoice_event("evt_2", "cus_nobody", period_end))

    resp = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert resp.status_code == 200
    assert test_user.is_premium is False


@pytest.mark.asyncio
async def test_subscription_deleted_revokes_premium(
    unauth_client: AsyncClient, stripe_customer, db_session, mock_external_services
):
    stripe_customer.is_premium = True
    stripe_customer.premium_expires_at = datetime.now(UTC) + timedelta(days=10)
    await db_session.flush()
    _accept(
        mock_external_services,
        {
            "id": "evt_del",
            "type": "customer.subscription.deleted",
            "data": {"object": {"id": "sub_live", "customer": "cus_live"}},
        },
    )

    resp = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert resp.status_code == 200
    await db_session.refresh(stripe_customer)
    assert stripe_customer.is_premium is False
    assert stripe_customer.stripe_subscription_id is None


@pytest.mark.asyncio
async def test_unhandled_event_type_is_acknowledged(
    unauth_client: AsyncClient, mock_external_services
):
    _accept(
        mock_external_services,
        {"id": "evt_other", "type": "customer.created", "data": {"object": {}}},
    )

    resp = await unauth_client.post("/api/v1/billing/webhooks/stripe", content=b"{}")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
