"""
Entitlement resolution: which daily limit applies to an identity.

resolve_limit() is pure. load_subscription() is the only part that reads the
database, and the usage gate calls it before resolving.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import LedgerUnavailable
from app.core.plan_limits import (
    ANONYMOUS_DAILY_LIMIT,
    FREE_DAILY_LIMIT,
    PREMIUM_DAILY_LIMIT,
    enforce_subscription_expiry,
)
from app.models.subscription import Subscription
from app.services.identity import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entitlement:
    daily_limit: int
    is_premium: bool


def is_subscription_active(
    subscription: Optional[Subscription],
    now: Optional[datetime] = None,
    enforce_expiry: Optional[bool] = None,
) -> bool:
    """
    The billing provider owns the `active` flag. By default it is trusted as-is,
    even past subscription_end; with expiry enforcement the end date must also be in the future.
    """
    if subscription is None or not subscription.active:
        return False
    if enforce_expiry is None:
        enforce_expiry = enforce_subscription_expiry()
    if not enforce_expiry or subscription.subscription_end is None:
        return True
    now = now or datetime.utcnow()
    return subscription.subscription_end > now


def resolve_limit(
    identity: Identity,
    subscription: Optional[Subscription] = None,
    now: Optional[datetime] = None,
    enforce_expiry: Optional[bool] = None,
) -> Entitlement:
    """Map an identity and its subscription state to a daily generation limit."""
    if identity.is_anonymous:
        return Entitlement(daily_limit=ANONYMOUS_DAILY_LIMIT, is_premium=False)

    if is_subscription_active(subscription, now=now, enforce_expiry=enforce_expiry):
        return Entitlement(daily_limit=PREMIUM_DAILY_LIMIT, is_premium=True)

    return Entitlement(daily_limit=FREE_DAILY_LIMIT, is_premium=False)


def load_subscription(db: Session, identity: Identity) -> Optional[Subscription]:
    """
    Read the subscription row for an authenticated identity.

    Every account gets a subscription row at signup, so a missing row is an anomaly:
    it is logged and the account is treated as free tier rather than failing the request.
    """
    if identity.is_anonymous:
        return None

    try:
        subscription = db.query(Subscription).filter(
            Subscription.user_id == identity.account_id
        ).first()
    except SQLAlchemyError as e:
        logger.exception("Subscription lookup failed for user %s", identity.account_id)
        raise LedgerUnavailable("Subscription data is temporarily unavailable") from e

    if subscription is None:
        logger.warning(
            "Entitlement inconsistent: user %s has no subscription row; applying free tier",
            identity.account_id,
        )
    return subscription
