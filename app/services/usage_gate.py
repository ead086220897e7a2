"""
Usage gate: decides whether an identity may generate a resume today and
records successful generations.

Callers follow check -> generate -> record:
    status = check_usage(db, identity, day)
    if not status.can_generate: refuse
    result = generate(...)            # may fail; nothing recorded then
    record_generation(db, identity, day)

By default the limit is a soft cap: two requests that both pass check_usage
before either records can overshoot it. With USAGE_HARD_CAP the record step
becomes an atomic "increment if below limit" and may refuse.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.core.plan_limits import hard_cap_enabled
from app.services import usage_ledger
from app.services.entitlement import load_subscription, resolve_limit
from app.services.identity import Identity, ledger_email, resolve_identity_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageStatus:
    can_generate: bool
    current_usage: int
    daily_limit: int
    remaining: int
    subscribed: bool

    def as_dict(self) -> dict:
        return {
            "can_generate": self.can_generate,
            "current_usage": self.current_usage,
            "daily_limit": self.daily_limit,
            "remaining": self.remaining,
            "subscribed": self.subscribed,
        }


@dataclass(frozen=True)
class GenerationRecord:
    new_usage: int
    accepted: bool = True


def check_usage(db: Session, identity: Identity, day: usage_ledger.DayLike = None) -> UsageStatus:
    """Read-only: resolve the limit and today's count. Safe to call any number of times."""
    identity_key = resolve_identity_key(identity)
    day = usage_ledger.normalize_day(day)

    entitlement = resolve_limit(identity, load_subscription(db, identity))
    current_usage = usage_ledger.get_count(db, identity_key, day)

    return UsageStatus(
        can_generate=current_usage < entitlement.daily_limit,
        current_usage=current_usage,
        daily_limit=entitlement.daily_limit,
        remaining=max(0, entitlement.daily_limit - current_usage),
        subscribed=entitlement.is_premium,
    )


def record_generation(
    db: Session,
    identity: Identity,
    day: usage_ledger.DayLike = None,
    hard_cap: Optional[bool] = None,
) -> GenerationRecord:
    """
    Count one successful generation. Call only after generation succeeded.

    Soft cap (default): always increments. Hard cap: increments only while below
    the daily limit; otherwise returns accepted=False with the unchanged count.
    """
    identity_key = resolve_identity_key(identity)
    day = usage_ledger.normalize_day(day)
    email = ledger_email(identity)

    if hard_cap is None:
        hard_cap = hard_cap_enabled()

    if not hard_cap:
        new_usage = usage_ledger.increment_and_get(
            db, identity_key, day, user_id=identity.account_id, email=email
        )
        return GenerationRecord(new_usage=new_usage)

    entitlement = resolve_limit(identity, load_subscription(db, identity))
    new_usage = usage_ledger.increment_if_below(
        db, identity_key, entitlement.daily_limit, day,
        user_id=identity.account_id, email=email,
    )
    if new_usage is None:
        logger.info(
            "Hard cap reached for %s on %s (limit %s); generation not recorded",
            identity_key, day, entitlement.daily_limit,
        )
        return GenerationRecord(
            new_usage=usage_ledger.get_count(db, identity_key, day),
            accepted=False,
        )
    return GenerationRecord(new_usage=new_usage)
