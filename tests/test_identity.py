"""Tests for identity -> usage ledger key resolution."""
import pytest

from app.core.errors import ValidationError
from app.core.plan_limits import ANONYMOUS_STRATEGY_CLIENT_TOKEN, ANONYMOUS_STRATEGY_SHARED
from app.services import identity as identities
from app.services.identity import ANONYMOUS_MARKER, Identity, ledger_email, resolve_identity_key


class TestResolveIdentityKey:
    def test_account_is_keyed_by_id(self):
        ident = identities.authenticated(42, "Jane@Example.com")
        assert resolve_identity_key(ident) == "42"
        assert ledger_email(ident) == "jane@example.com"

    def test_anonymous_uses_shared_marker(self):
        assert resolve_identity_key(identities.ANONYMOUS) == ANONYMOUS_MARKER
        assert ledger_email(identities.ANONYMOUS) == ANONYMOUS_MARKER

    def test_shared_strategy_ignores_client_token(self):
        ident = identities.anonymous("browser-1")
        assert resolve_identity_key(ident, ANONYMOUS_STRATEGY_SHARED) == ANONYMOUS_MARKER

    def test_client_token_strategy_splits_anonymous_callers(self):
        a = identities.anonymous("browser-1")
        b = identities.anonymous("browser-2")
        key_a = resolve_identity_key(a, ANONYMOUS_STRATEGY_CLIENT_TOKEN)
        key_b = resolve_identity_key(b, ANONYMOUS_STRATEGY_CLIENT_TOKEN)
        assert key_a == "anonymous:browser-1"
        assert key_a != key_b

    def test_client_token_strategy_without_token_falls_back_to_shared(self):
        assert resolve_identity_key(identities.anonymous(), ANONYMOUS_STRATEGY_CLIENT_TOKEN) == ANONYMOUS_MARKER

    def test_strategy_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("USAGE_ANONYMOUS_STRATEGY", "client_token")
        assert resolve_identity_key(identities.anonymous("abc")) == "anonymous:abc"

    def test_unknown_strategy_falls_back_to_shared(self, monkeypatch):
        monkeypatch.setenv("USAGE_ANONYMOUS_STRATEGY", "per-ip")
        assert resolve_identity_key(identities.anonymous("abc")) == ANONYMOUS_MARKER


class TestIdentityValidation:
    def test_authenticated_requires_email(self):
        with pytest.raises(ValidationError):
            identities.authenticated(1, "")

    def test_authenticated_requires_account_id(self):
        with pytest.raises(ValidationError):
            identities.authenticated(None, "a@example.com")

    def test_account_identity_without_email_is_rejected(self):
        with pytest.raises(ValidationError):
            resolve_identity_key(Identity(account_id=7))

    def test_missing_identity_is_rejected(self):
        with pytest.raises(ValidationError):
            resolve_identity_key(None)

    @pytest.mark.parametrize("token", ["", "has space", "x" * 129, "semi;colon"])
    def test_malformed_client_token(self, token):
        with pytest.raises(ValidationError):
            identities.anonymous(token)
