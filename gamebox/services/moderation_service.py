"""Moderation coordinator: hide/unhide a review together with strikes and suspension."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from gamebox.core.config import ModerationPolicy
from gamebox.core.errors import NotFoundError
from gamebox.core.utils import as_utc, normalize_optional_text
from gamebox.db.session import commit_or_fail, get_for_update, storage_unit
from gamebox.models.review import Review, ReviewVisibilityStatus
from gamebox.models.user import User
from gamebox.services.strike_service import active_strike_count, issue_or_renew_strike, revoke_strike
from gamebox.services.suspension_service import reevaluate_suspension

logger = logging.getLogger(__name__)

DEFAULT_HIDDEN_REASON = "Hidden by moderator"


@dataclass
class ModerationOutcome:
    visibility_status: ReviewVisibilityStatus
    active_strike_count: int
    strike_limit: int
    suspended_until: datetime | None


def _get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    return review


def _lock_author(db: Session, author_id: int) -> User:
    # Row lock serializes concurrent moderation of the same author so the
    # strike count below is never stale.
    author = get_for_update(db, User, author_id)
    if not author:
        raise NotFoundError("User not found")
    return author


@storage_unit
def hide_review(
    db: Session,
    review_id: int,
    moderator_id: int,
    policy: ModerationPolicy,
    reason: str | None = None,
    now: datetime | None = None,
) -> ModerationOutcome:
    """Hide a review, issue or renew its strike and escalate the author's suspension."""
    now = now or datetime.now(timezone.utc)
    review = _get_review(db, review_id)
    author_id = review.user_id
    _lock_author(db, author_id)

    review.visibility_status = ReviewVisibilityStatus.HIDDEN
    review.hidden_at = now
    review.hidden_reason = normalize_optional_text(reason) or DEFAULT_HIDDEN_REASON
    review.hidden_by_id = moderator_id
    db.flush()

    issue_or_renew_strike(db, review_id, author_id, moderator_id)
    count = active_strike_count(db, author_id)
    suspended_until = reevaluate_suspension(
        db,
        author_id,
        count,
        policy.strike_limit,
        policy.suspension_days,
        now,
        deescalate=False,
    )
    commit_or_fail(db)
    logger.info(
        "Review hidden: review=%s author=%s moderator=%s strikes=%s/%s",
        review_id,
        author_id,
        moderator_id,
        count,
        policy.strike_limit,
    )
    return ModerationOutcome(
        visibility_status=ReviewVisibilityStatus.HIDDEN,
        active_strike_count=count,
        strike_limit=policy.strike_limit,
        suspended_until=as_utc(suspended_until),
    )


@storage_unit
def unhide_review(
    db: Session,
    review_id: int,
    policy: ModerationPolicy,
    now: datetime | None = None,
) -> ModerationOutcome:
    """Restore a review, revoke its strike and lift the suspension if below the limit."""
    now = now or datetime.now(timezone.utc)
    review = _get_review(db, review_id)
    author_id = review.user_id
    _lock_author(db, author_id)

    review.visibility_status = ReviewVisibilityStatus.ACTIVE
    review.hidden_at = None
    review.hidden_reason = None
    review.hidden_by_id = None
    db.flush()

    revoke_strike(db, review_id, now)
    count = active_strike_count(db, author_id)
    suspended_until = reevaluate_suspension(
        db,
        author_id,
        count,
        policy.strike_limit,
        policy.suspension_days,
        now,
        escalate=False,
    )
    commit_or_fail(db)
    logger.info(
        "Review restored: review=%s author=%s strikes=%s/%s",
        review_id,
        author_id,
        count,
        policy.strike_limit,
    )
    return ModerationOutcome(
        visibility_status=ReviewVisibilityStatus.ACTIVE,
        active_strike_count=count,
        strike_limit=policy.strike_limit,
        suspended_until=as_utc(suspended_until),
    )
