"""
Service for the persistent daily usage ledger (table resume_usage).

Counters are keyed by (identity_key, usage_date). Increments are a single
INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement, so concurrent
increments of the same row are serialized by the database and none are lost.
Unrelated identities never contend for the same row.

Days are UTC calendar dates formatted as YYYY-MM-DD.
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional, Union

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import LedgerUnavailable, ValidationError
from app.models.resume_usage import ResumeUsage
from app.services.identity import ANONYMOUS_MARKER

logger = logging.getLogger(__name__)

DAY_FORMAT = "%Y-%m-%d"

DayLike = Union[date, str, None]


def today_utc() -> str:
    return datetime.now(timezone.utc).strftime(DAY_FORMAT)


def normalize_day(day: DayLike = None) -> str:
    """Return day as YYYY-MM-DD. None means today (UTC)."""
    if day is None:
        return today_utc()
    if isinstance(day, datetime):
        return day.date().strftime(DAY_FORMAT)
    if isinstance(day, date):
        return day.strftime(DAY_FORMAT)
    if isinstance(day, str):
        try:
            parsed = datetime.strptime(day, DAY_FORMAT)
        except ValueError:
            raise ValidationError(f"Malformed day {day!r}: expected YYYY-MM-DD")
        # strptime accepts unpadded months/days; the ledger key must be canonical
        if parsed.strftime(DAY_FORMAT) != day:
            raise ValidationError(f"Malformed day {day!r}: expected YYYY-MM-DD")
        return day
    raise ValidationError(f"Malformed day {day!r}: expected YYYY-MM-DD")


def _require_key(identity_key: str) -> str:
    if not identity_key or not str(identity_key).strip():
        raise ValidationError("identity_key is required")
    return str(identity_key)


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"Atomic usage increments are not supported on {dialect}")


def _upsert_increment(db: Session, identity_key: str, day: str, user_id: Optional[int], email: str, where=None):
    insert = _insert_for(db)
    now = datetime.utcnow()
    stmt = insert(ResumeUsage).values(
        identity_key=identity_key,
        user_id=user_id,
        email=email,
        usage_date=day,
        count=1,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["identity_key", "usage_date"],
        set_={"count": ResumeUsage.count + 1, "updated_at": now},
        where=where,
    ).returning(ResumeUsage.count)
    return db.execute(stmt).scalar_one_or_none()


def get_count(db: Session, identity_key: str, day: DayLike = None) -> int:
    """Current counter for (identity_key, day). 0 when no row exists; never creates one."""
    identity_key = _require_key(identity_key)
    day = normalize_day(day)
    try:
        count = db.query(ResumeUsage.count).filter(
            ResumeUsage.identity_key == identity_key,
            ResumeUsage.usage_date == day
        ).scalar()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Usage ledger read failed for %s on %s", identity_key, day)
        raise LedgerUnavailable("Usage ledger is temporarily unavailable") from e
    return count or 0


def increment_and_get(
    db: Session,
    identity_key: str,
    day: DayLike = None,
    user_id: Optional[int] = None,
    email: str = ANONYMOUS_MARKER,
) -> int:
    """Atomically add one to (identity_key, day), creating the row at 1. Returns the new count."""
    identity_key = _require_key(identity_key)
    day = normalize_day(day)
    try:
        new_count = _upsert_increment(db, identity_key, day, user_id, email)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Usage ledger increment failed for %s on %s", identity_key, day)
        raise LedgerUnavailable("Usage ledger is temporarily unavailable") from e
    logger.debug("Usage for %s on %s is now %s", identity_key, day, new_count)
    return new_count


def increment_if_below(
    db: Session,
    identity_key: str,
    limit: int,
    day: DayLike = None,
    user_id: Optional[int] = None,
    email: str = ANONYMOUS_MARKER,
) -> Optional[int]:
    """
    Atomically add one only while the counter is below limit.

    Returns the new count, or None when the counter had already reached the limit
    (the row is left untouched). Check and increment happen in one statement,
    so concurrent callers can never push the counter past the limit.
    """
    identity_key = _require_key(identity_key)
    day = normalize_day(day)
    if limit <= 0:
        return None
    try:
        new_count = _upsert_increment(
            db, identity_key, day, user_id, email,
            where=ResumeUsage.count < limit,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Usage ledger conditional increment failed for %s on %s", identity_key, day)
        raise LedgerUnavailable("Usage ledger is temporarily unavailable") from e
    return new_count
