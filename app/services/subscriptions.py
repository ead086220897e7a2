"""
Subscription state changes. Only signup and the billing provider's webhook
write subscriptions; the usage gate reads them.

States: INACTIVE (created with the account) and ACTIVE (after checkout).
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.subscription import Subscription

logger = logging.getLogger(__name__)

# Billing events that move a subscription to ACTIVE / INACTIVE
ACTIVATING_EVENTS = {"checkout.completed", "subscription.renewed"}
DEACTIVATING_EVENTS = {"subscription.cancelled", "subscription.expired"}
BILLING_EVENTS = ACTIVATING_EVENTS | DEACTIVATING_EVENTS


def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Subscription timestamps are stored as naive UTC, like the rest of the schema
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def create_inactive_subscription(db: Session, user_id: int, email: str) -> Subscription:
    """Add the INACTIVE subscription that every new account starts with. Caller commits."""
    subscription = Subscription(
        user_id=user_id,
        email=email,
        active=False,
    )
    db.add(subscription)
    return subscription


def get_or_create_subscription(db: Session, user_id: int, email: str) -> Subscription:
    subscription = db.query(Subscription).filter(Subscription.user_id == user_id).first()
    if not subscription:
        subscription = create_inactive_subscription(db, user_id, email)
        db.flush()
        logger.warning("Created missing subscription row for user %s", user_id)
    return subscription


def activate_subscription(
    db: Session,
    subscription: Subscription,
    tier: Optional[str] = None,
    subscription_end: Optional[datetime] = None,
    billing_customer_id: Optional[str] = None,
) -> Subscription:
    subscription.active = True
    if tier is not None:
        subscription.subscription_tier = tier
    subscription.subscription_end = _as_naive_utc(subscription_end)
    if billing_customer_id is not None:
        subscription.billing_customer_id = billing_customer_id
    db.commit()
    db.refresh(subscription)
    logger.info(
        "Subscription for user %s is ACTIVE (tier=%s, ends=%s)",
        subscription.user_id, subscription.subscription_tier, subscription.subscription_end,
    )
    return subscription


def deactivate_subscription(db: Session, subscription: Subscription) -> Subscription:
    subscription.active = False
    db.commit()
    db.refresh(subscription)
    logger.info("Subscription for user %s is INACTIVE", subscription.user_id)
    return subscription


def apply_billing_event(
    db: Session,
    subscription: Subscription,
    event_type: str,
    tier: Optional[str] = None,
    subscription_end: Optional[datetime] = None,
    billing_customer_id: Optional[str] = None,
) -> Subscription:
    if event_type in ACTIVATING_EVENTS:
        return activate_subscription(
            db, subscription,
            tier=tier,
            subscription_end=subscription_end,
            billing_customer_id=billing_customer_id,
        )
    if event_type in DEACTIVATING_EVENTS:
        return deactivate_subscription(db, subscription)
    raise ValueError(f"Unsupported billing event: {event_type}")
