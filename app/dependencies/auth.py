from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
from typing import Optional
from app.core.plan_limits import ANONYMOUS_STRATEGY_CLIENT_TOKEN, anonymous_strategy
from app.db.session import get_db
from app.models.user import User
from app.services import identity as identities
from app.services.identity import Identity
from app.utils.auth import verify_token, get_user_id_from_payload

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required"
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid header format. Expected 'Bearer <token>'"
        )

    token = authorization.replace("Bearer ", "", 1).strip()

    # Reject common invalid token values sent by clients without a session
    if not token or token.lower() in ["null", "undefined", "none"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required"
        )
    return token


def _load_user(token: str, db: Session) -> User:
    payload = verify_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )

    user_id = get_user_id_from_payload(payload)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing user ID claim"
        )

    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        logger.exception("Database error while loading user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database temporarily unavailable. Please try again in a moment."
        )

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found or deactivated"
        )
    return user


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    """FastAPI dependency: the authenticated account, or 401."""
    token = extract_bearer_token(authorization)
    return _load_user(token, db)


def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    return user.id


def get_optional_identity(
    authorization: Optional[str] = Header(None),
    x_client_token: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Identity:
    """
    FastAPI dependency for endpoints open to anonymous callers.

    No Authorization header: anonymous identity. X-Client-Token is only read
    (and validated) under the client_token anonymous strategy.
    A header that is present but invalid is rejected rather than downgraded to anonymous,
    so an expired session never silently draws from the anonymous quota.
    """
    if not authorization:
        if anonymous_strategy() != ANONYMOUS_STRATEGY_CLIENT_TOKEN:
            return identities.anonymous()
        # A malformed client token raises ValidationError (400 via the app's handler)
        return identities.anonymous(x_client_token)

    token = extract_bearer_token(authorization)
    user = _load_user(token, db)
    return identities.authenticated(user.id, user.email)
