"""
Model for tracking resume generations per (identity, calendar day).
One row per identity per UTC day; rows are never deleted so past days stay available for audit.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from datetime import datetime
from app.db.base import Base


class ResumeUsage(Base):
    __tablename__ = "resume_usage"
    __table_args__ = (
        UniqueConstraint("identity_key", "usage_date", name="uq_resume_usage_identity_date"),
        CheckConstraint("count >= 0", name="ck_resume_usage_count_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # str(user_id) for accounts, "anonymous" (or "anonymous:<token>") otherwise
    identity_key = Column(String(160), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    email = Column(String, nullable=False)  # Denormalized; the anonymous marker for anonymous callers
    usage_date = Column(String(10), nullable=False)  # YYYY-MM-DD (UTC)
    count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ResumeUsage(identity_key={self.identity_key}, date={self.usage_date}, count={self.count})>"
