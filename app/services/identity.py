"""
Identity of a metered request and how it maps onto a usage ledger key.

The auth dependency supplies an authenticated account (id + email) or nothing.
Authenticated usage is keyed by account id; anonymous usage is keyed by the
anonymous marker, optionally split per client token (see plan_limits.anonymous_strategy).
"""
import re
from dataclasses import dataclass
from typing import Optional

from app.core.errors import ValidationError
from app.core.plan_limits import ANONYMOUS_STRATEGY_CLIENT_TOKEN, anonymous_strategy

ANONYMOUS_MARKER = "anonymous"

_CLIENT_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


@dataclass(frozen=True)
class Identity:
    account_id: Optional[int] = None
    email: Optional[str] = None
    client_token: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.account_id is None


ANONYMOUS = Identity()


def authenticated(account_id: int, email: str) -> Identity:
    if account_id is None or not email:
        raise ValidationError("Authenticated identity requires both account id and email")
    return Identity(account_id=account_id, email=email.lower())


def anonymous(client_token: Optional[str] = None) -> Identity:
    if client_token is not None:
        client_token = client_token.strip()
        if not _CLIENT_TOKEN_RE.match(client_token):
            raise ValidationError(
                "Invalid client token: expected 1-128 characters of letters, digits, '-' or '_'"
            )
    return Identity(client_token=client_token)


def resolve_identity_key(identity: Identity, strategy: Optional[str] = None) -> str:
    """Return the usage ledger key for an identity.

    Accounts: str(account_id). Anonymous: the shared marker, or
    "anonymous:<token>" when the client-token strategy is active and a token was sent.
    """
    if identity is None:
        raise ValidationError("Identity is required")

    if not identity.is_anonymous:
        if not identity.email:
            raise ValidationError("Authenticated identity is missing an email")
        return str(identity.account_id)

    strategy = strategy or anonymous_strategy()
    if strategy == ANONYMOUS_STRATEGY_CLIENT_TOKEN and identity.client_token:
        return f"{ANONYMOUS_MARKER}:{identity.client_token}"
    return ANONYMOUS_MARKER


def ledger_email(identity: Identity) -> str:
    """Email stored alongside the ledger row (the marker for anonymous callers)."""
    if identity.is_anonymous:
        return ANONYMOUS_MARKER
    return identity.email
