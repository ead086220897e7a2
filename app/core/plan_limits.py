import os
from typing import Dict

# Daily resume generation limits per tier.
# Anonymous callers have no account; free accounts have an inactive (or missing) subscription.
PLAN_LIMITS: Dict[str, Dict[str, int]] = {
    "anonymous": {
        "max_generations_per_day": 3,
    },
    "free": {
        "max_generations_per_day": 5,
    },
    "premium": {
        "max_generations_per_day": 50,
    },
}

# How anonymous callers are bucketed in the usage ledger:
#   "shared"       - every anonymous caller shares one bucket per day
#   "client_token" - an X-Client-Token header gives each client its own bucket
ANONYMOUS_STRATEGY_SHARED = "shared"
ANONYMOUS_STRATEGY_CLIENT_TOKEN = "client_token"
ANONYMOUS_STRATEGIES = (ANONYMOUS_STRATEGY_SHARED, ANONYMOUS_STRATEGY_CLIENT_TOKEN)


def get_plan_limit(plan_tier: str, limit_type: str = "max_generations_per_day") -> int:
    """Get the limit value for a specific plan and limit type."""
    return PLAN_LIMITS.get(plan_tier, PLAN_LIMITS["free"]).get(limit_type, 0)


ANONYMOUS_DAILY_LIMIT = get_plan_limit("anonymous")
FREE_DAILY_LIMIT = get_plan_limit("free")
PREMIUM_DAILY_LIMIT = get_plan_limit("premium")


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Read at call time so a deployment (or a test) can flip them without re-importing.

def anonymous_strategy() -> str:
    strategy = os.getenv("USAGE_ANONYMOUS_STRATEGY", ANONYMOUS_STRATEGY_SHARED).strip().lower()
    if strategy not in ANONYMOUS_STRATEGIES:
        return ANONYMOUS_STRATEGY_SHARED
    return strategy


def hard_cap_enabled() -> bool:
    return _env_flag("USAGE_HARD_CAP")


def enforce_subscription_expiry() -> bool:
    return _env_flag("ENFORCE_SUBSCRIPTION_EXPIRY")
