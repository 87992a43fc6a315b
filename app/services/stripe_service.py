"""Stripe payment service for the premium subscription."""

import logging
from dataclasses import dataclass
from typing import Any

import stripe
from stripe import StripeError

from app.config import PREMIUM_PLAN, settings
from app.models.user import User

logger = logging.getLogger(__name__)

# Initialize Stripe with secret key
stripe.api_key = settings.stripe_secret_key


@dataclass
class SubscriptionIntent:
    """What the client needs to confirm the first payment of a subscription."""

    subscription_id: str
    client_secret: str | None
    customer_id: str


def _client_secret(subscription: Any) -> str | None:
    """Dig the payment intent client secret out of an expanded subscription."""
    invoice = subscription.get("latest_invoice") or {}
    if isinstance(invoice, str):
        return None
    payment_intent = invoice.get("payment_intent") or {}
    if isinstance(payment_intent, str):
        return None
    return payment_intent.get("client_secret")


class StripeService:
    """
    Handles all Stripe API interactions.

    All methods are static and stateless. Stripe SDK handles connection pooling.
    Failures are logged and re-raised; the caller decides how to surface them.
    Nothing is compensated if a later step of a multi-step flow fails.

    Pricing model:
    - StreamHub Premium: 19.99 PLN/mo, ad-free playback of the whole catalog
    """

    @staticmethod
    def create_customer(user: User) -> str:
        """
        Create a Stripe customer for a viewer.

        Returns the Stripe customer ID (cus_...).
        """
        try:
            customer = stripe.Customer.create(
                email=user.email or "",
                metadata={
                    "user_id": str(user.id),
                    "environment": "production" if "live" in (settings.stripe_secret_key or "") else "test",
                },
            )
            logger.info(f"Created Stripe customer {customer.id} for viewer {user.id}")
            return customer.id
        except StripeError as e:
            logger.error(f"Failed to create Stripe customer: {e}")
            raise

    @staticmethod
    def get_price_id() -> str:
        """
        Price for the premium plan.

        Uses STRIPE_PREMIUM_PRICE_ID when configured, otherwise creates the
        product and its monthly price on the fly.
        """
        if settings.stripe_premium_price_id:
            return settings.stripe_premium_price_id

        try:
            product = stripe.Product.create(
                name=PREMIUM_PLAN.product_name,
                description=PREMIUM_PLAN.description,
            )
            price = stripe.Price.create(
                product=product.id,
                unit_amount=PREMIUM_PLAN.price_amount,
                currency=PREMIUM_PLAN.currency,
                recurring={"interval": PREMIUM_PLAN.interval},  # type: ignore[typeddict-item]
            )
            logger.info(f"Created Stripe price {price.id} for {PREMIUM_PLAN.product_name}")
            return price.id
        except StripeError as e:
            logger.error(f"Failed to create premium price: {e}")
            raise

    @staticmethod
    def get_subscription(stripe_subscription_id: str) -> Any:
        """Retrieve a subscription with its latest invoice's payment intent expanded."""
        try:
            return stripe.Subscription.retrieve(
                stripe_subscription_id,
                expand=["latest_invoice.payment_intent"],
            )
        except StripeError as e:
            logger.error(f"Failed to retrieve subscription: {e}")
            raise

    @staticmethod
    def create_or_resume_subscription(user: User) -> SubscriptionIntent:
        """
        Create the viewer's premium subscription, or resume the one on file.

        A stored subscription is retrieved and its pending payment returned.
        Otherwise: customer (reused if on file) -> price -> subscription in
        `default_incomplete` state so the client confirms the first payment.
        """
        if user.stripe_subscription_id and user.stripe_customer_id:
            sub = StripeService.get_subscription(user.stripe_subscription_id)
            logger.info(f"Resuming subscription {sub.id} for viewer {user.id}")
            return SubscriptionIntent(
                subscription_id=sub.id,
                client_secret=_client_secret(sub),
                customer_id=user.stripe_customer_id,
            )

        customer_id = user.stripe_customer_id or StripeService.create_customer(user)
        price_id = StripeService.get_price_id()

        try:
            sub = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                payment_settings={"save_default_payment_method": "on_subscription"},
                expand=["latest_invoice.payment_intent"],
                metadata={"user_id": str(user.id)},
            )
            logger.info(f"Created subscription {sub.id} for viewer {user.id}")
        except StripeError as e:
            logger.error(f"Failed to create subscription: {e}")
            raise

        return SubscriptionIntent(
            subscription_id=sub.id,
            client_secret=_client_secret(sub),
            customer_id=customer_id,
        )

    @staticmethod
    def construct_webhook_event(payload: bytes, signature: str) -> dict[str, object]:
        """
        Verify and construct a webhook event from Stripe.

        Raises ValueError if signature verification fails.
        """
        try:
            event = stripe.Webhook.construct_event(  # type: ignore[no-untyped-call]
                payload,
                signature,
                settings.stripe_webhook_secret,
            )
            return dict(event)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise ValueError("Invalid webhook signature") from None
        except ValueError as e:
            logger.warning(f"Invalid webhook payload: {e}")
            raise ValueError("Invalid webhook payload") from None


# Singleton instance
stripe_service = StripeService()
