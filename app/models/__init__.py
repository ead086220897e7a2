from app.models.user import User
from app.models.subscription import Subscription
from app.models.resume import Resume
from app.models.resume_usage import ResumeUsage

__all__ = [
    "User",
    "Subscription",
    "Resume",
    "ResumeUsage",
]
