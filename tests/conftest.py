"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired to it,
and factories for accounts with and without subscriptions.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.subscription import Subscription
from app.models.user import User
from app.utils.auth import create_user_token


@pytest.fixture(autouse=True)
def usage_policy_env(monkeypatch):
    """Every test starts from the default policy: shared anonymous bucket, soft cap, trusted expiry."""
    for name in ("USAGE_HARD_CAP", "USAGE_ANONYMOUS_STRATEGY", "ENFORCE_SUBSCRIPTION_EXPIRY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Create an account. subscription: "inactive" (default), "active", or None for no row."""
    counter = {"n": 0}

    def _make_user(email=None, subscription="inactive", subscription_end=None, is_active=True):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            hashed_password="not-a-real-hash",
            first_name="Test",
            last_name=f"User{counter['n']}",
            is_active=is_active,
        )
        db_session.add(user)
        db_session.flush()
        if subscription is not None:
            db_session.add(Subscription(
                user_id=user.id,
                email=user.email,
                active=subscription == "active",
                subscription_tier="premium" if subscription == "active" else None,
                subscription_end=subscription_end,
            ))
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_user_token(user.id, user.email)}"}
    return _auth_headers
