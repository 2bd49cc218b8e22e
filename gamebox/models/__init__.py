"""SQLAlchemy models."""

from __future__ import annotations

from gamebox.models.follow import Follow, FollowStatus
from gamebox.models.moderation_strike import ModerationStrike
from gamebox.models.notification import Notification, NotificationType
from gamebox.models.report import Report, ReportReason, ReportStatus
from gamebox.models.review import Review, ReviewVisibilityStatus
from gamebox.models.suspension_appeal import SuspensionAppeal, SuspensionAppealStatus
from gamebox.models.user import User

__all__ = [
    "User",
    "Review",
    "ReviewVisibilityStatus",
    "Report",
    "ReportReason",
    "ReportStatus",
    "ModerationStrike",
    "SuspensionAppeal",
    "SuspensionAppealStatus",
    "Follow",
    "FollowStatus",
    "Notification",
    "NotificationType",
]
