"""
Stripe billing: checkout session creation and webhook event handling.

The subscriptions table is the source of truth for billing state.
users.plan_tier and users.stripe_subscription_id are derived from it by
apply_subscription_state() and are not written anywhere else.
"""
import json
import logging
from datetime import datetime
from typing import Optional
import stripe
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.exceptions import UpstreamError, ValidationError, WebhookVerificationError
from app.models.subscription import Subscription
from app.models.user import Plan, User
from app.services.accounts import get_user_or_404

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing", "past_due")


def create_checkout_session(db: Session, settings: Settings, user_id: int, price_id: Optional[str]) -> dict:
    """
    Create a Stripe Checkout Session for a subscription.
    The Stripe customer is created on first checkout and remembered on the user.
    """
    if not price_id:
        raise ValidationError("Price id is required")

    user = get_user_or_404(db, user_id)
    metadata = {"user_id": str(user.id), "price_id": price_id}

    try:
        customer_id = user.stripe_customer_id
        if not customer_id:
            customer = stripe.Customer.create(
                email=user.email,
                metadata={"user_id": str(user.id)},
                api_key=settings.stripe_secret_key,
            )
            customer_id = customer.id
            user.stripe_customer_id = customer_id
            db.commit()

        checkout_session = stripe.checkout.Session.create(
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[
                {
                    "price": price_id,
                    "quantity": 1,
                }
            ],
            mode="subscription",
            success_url=f"{settings.frontend_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.frontend_url}/pricing",
            metadata=metadata,
            subscription_data={"metadata": metadata},
            api_key=settings.stripe_secret_key,
        )
    except stripe.StripeError as e:
        logger.error("❌ Stripe error creating checkout session for user %s: %s", user.id, e)
        raise UpstreamError("Error creating the checkout session")

    logger.info("✅ Created Stripe Checkout Session: %s for user %s", checkout_session.id, user.id)

    return {"sessionId": checkout_session.id, "url": checkout_session.url}


def construct_event(payload: bytes, signature_header: Optional[str], webhook_secret: Optional[str]):
    """Verify the Stripe-Signature header and parse the event payload into plain dicts."""
    if not signature_header:
        raise WebhookVerificationError("Webhook Error: missing Stripe-Signature header")
    if not webhook_secret:
        raise WebhookVerificationError("Webhook Error: webhook secret is not configured")

    try:
        stripe.WebhookSignature.verify_header(
            payload.decode("utf-8"),
            signature_header,
            webhook_secret,
            stripe.Webhook.DEFAULT_TOLERANCE,
        )
        event = json.loads(payload)
        if not isinstance(event, dict):
            raise ValueError("Payload is not a JSON object")
        return event
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("Stripe webhook verification failed: %s", e)
        raise WebhookVerificationError(f"Webhook Error: {e}")


def plan_for_price(price_id: Optional[str], yearly_price_id: Optional[str]) -> Plan:
    if price_id and yearly_price_id and price_id == yearly_price_id:
        return Plan.PREMIUM_YEARLY
    return Plan.PREMIUM_MONTHLY


def apply_subscription_state(user: User, subscription: Subscription, yearly_price_id: Optional[str]) -> None:
    """Derive the user's cached plan fields from their subscription record."""
    if subscription.status in ACTIVE_STATUSES:
        user.plan_tier = plan_for_price(subscription.stripe_price_id, yearly_price_id).value
        user.stripe_subscription_id = subscription.stripe_subscription_id
    else:
        user.plan_tier = Plan.FREE.value
        user.stripe_subscription_id = None


def handle_event(db: Session, settings: Settings, event: dict) -> None:
    """Dispatch a verified Stripe event. Unknown event types are ignored."""
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}

    logger.info("[Stripe webhook] type=%s", event_type)

    if event_type == "checkout.session.completed":
        _handle_checkout_completed(db, settings, obj)
    elif event_type == "customer.subscription.deleted":
        _handle_subscription_deleted(db, settings, obj)


def _resolve_price_id(session: dict) -> Optional[str]:
    """
    Price of the purchased plan. Sessions created by this service carry it in
    metadata; line_items are only present when the event payload was expanded.
    """
    metadata = session.get("metadata") or {}
    if metadata.get("price_id"):
        return metadata["price_id"]

    line_items = session.get("line_items") or {}
    items = line_items.get("data") or []
    if items:
        price = items[0].get("price") or {}
        return price.get("id")

    return None


def _stripe_id(value) -> Optional[str]:
    """A Stripe reference may arrive as an id string or as an expanded object."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return value.get("id")


def _timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    return datetime.utcfromtimestamp(value)


def _handle_checkout_completed(db: Session, settings: Settings, session: dict) -> None:
    metadata = session.get("metadata") or {}
    raw_user_id = metadata.get("user_id") or metadata.get("userId")
    subscription_id = _stripe_id(session.get("subscription"))

    if not raw_user_id or not subscription_id:
        logger.warning("checkout.session.completed without user or subscription reference")
        return

    try:
        user = db.query(User).filter(User.id == int(raw_user_id)).first()
    except (TypeError, ValueError):
        user = None

    if not user:
        logger.warning("checkout.session.completed for unknown user %s", raw_user_id)
        return

    price_id = _resolve_price_id(session)

    subscription = db.query(Subscription).filter(Subscription.user_id == user.id).first()
    if subscription:
        subscription.stripe_subscription_id = subscription_id
        subscription.stripe_price_id = price_id
        subscription.status = "active"
        subscription.cancel_at_period_end = False
    else:
        subscription = Subscription(
            user_id=user.id,
            stripe_subscription_id=subscription_id,
            stripe_price_id=price_id,
            status="active",
        )
        db.add(subscription)

    apply_subscription_state(user, subscription, settings.stripe_price_yearly)
    db.commit()

    logger.info("✅ User %s upgraded to %s (subscription %s)", user.id, user.plan_tier, subscription_id)


def _handle_subscription_deleted(db: Session, settings: Settings, stripe_subscription: dict) -> None:
    subscription_id = stripe_subscription.get("id")
    if not subscription_id:
        return

    user = db.query(User).filter(User.stripe_subscription_id == subscription_id).first()
    if not user:
        logger.info("customer.subscription.deleted for unknown subscription %s", subscription_id)
        return

    subscription = db.query(Subscription).filter(Subscription.user_id == user.id).first()
    if not subscription:
        subscription = Subscription(user_id=user.id, stripe_subscription_id=subscription_id)
        db.add(subscription)

    status_val = stripe_subscription.get("status") or "canceled"
    if status_val in ACTIVE_STATUSES:
        status_val = "canceled"

    subscription.stripe_subscription_id = subscription_id
    subscription.status = status_val
    subscription.cancel_at_period_end = bool(stripe_subscription.get("cancel_at_period_end"))
    period_start = _timestamp(stripe_subscription.get("current_period_start"))
    period_end = _timestamp(stripe_subscription.get("current_period_end"))
    if period_start:
        subscription.current_period_start = period_start
    if period_end:
        subscription.current_period_end = period_end

    apply_subscription_state(user, subscription, settings.stripe_price_yearly)
    db.commit()

    logger.info("User %s reverted to %s after subscription %s ended", user.id, user.plan_tier, subscription_id)
