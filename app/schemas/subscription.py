from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime


class SubscriptionStatusResponse(BaseModel):
    subscribed: bool
    subscription_tier: Optional[str] = None
    subscription_end: Optional[datetime] = None


class CheckoutResponse(BaseModel):
    checkout_url: str


class BillingWebhookEvent(BaseModel):
    event_type: Literal[
        "checkout.completed",
        "subscription.renewed",
        "subscription.cancelled",
        "subscription.expired",
    ]
    user_id: int
    subscription_tier: Optional[str] = None
    subscription_end: Optional[datetime] = None
    billing_customer_id: Optional[str] = None
