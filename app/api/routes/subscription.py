"""
Subscription status, checkout and the billing provider's webhook.
Checkout is mocked: it returns a fixed provider URL. The webhook is the only
writer of subscription state after signup.
"""
import hmac
import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Header, status
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.subscription import SubscriptionStatusResponse, CheckoutResponse, BillingWebhookEvent
from app.services.entitlement import is_subscription_active
from app.services.subscriptions import apply_billing_event, get_or_create_subscription

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT_URL = "https://checkout.stripe.com/mock-session"


@router.get("/status", response_model=SubscriptionStatusResponse)
def subscription_status(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    subscription = db.query(Subscription).filter(Subscription.user_id == user_id).first()
    if not subscription:
        return {
            "subscribed": False,
            "subscription_tier": None,
            "subscription_end": None,
        }

    return {
        "subscribed": is_subscription_active(subscription),
        "subscription_tier": subscription.subscription_tier,
        "subscription_end": subscription.subscription_end,
    }


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(user_id: int = Depends(get_current_user_id)):
    logger.info("Creating checkout session for user %s", user_id)
    return {"checkout_url": os.getenv("CHECKOUT_URL", DEFAULT_CHECKOUT_URL)}


@router.post("/webhook", response_model=SubscriptionStatusResponse)
def billing_webhook(
    event: BillingWebhookEvent,
    db: Session = Depends(get_db),
    x_billing_secret: Optional[str] = Header(None),
):
    """Apply a billing provider event (checkout/renewal -> ACTIVE, cancellation/expiry -> INACTIVE)."""
    secret = os.getenv("BILLING_WEBHOOK_SECRET", "")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Billing webhook not configured"
        )
    # Compared as bytes: header values may carry non-ASCII (latin-1) characters
    if not x_billing_secret or not hmac.compare_digest(x_billing_secret.encode(), secret.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature"
        )

    user = db.query(User).filter(User.id == event.user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    subscription = get_or_create_subscription(db, user.id, user.email)
    subscription = apply_billing_event(
        db,
        subscription,
        event.event_type,
        tier=event.subscription_tier,
        subscription_end=event.subscription_end,
        billing_customer_id=event.billing_customer_id,
    )

    return {
        "subscribed": is_subscription_active(subscription),
        "subscription_tier": subscription.subscription_tier,
        "subscription_end": subscription.subscription_end,
    }
