"""Strike ledger: one moderation strike per hidden review."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gamebox.models.moderation_strike import ModerationStrike

logger = logging.getLogger(__name__)


def get_strike_for_review(db: Session, review_id: int) -> ModerationStrike | None:
    return db.execute(
        select(ModerationStrike).where(ModerationStrike.review_id == review_id)
    ).scalar_one_or_none()


def issue_or_renew_strike(db: Session, review_id: int, author_id: int, issued_by: int) -> ModerationStrike:
    """Upsert the strike for a review. A revoked strike is reactivated, never duplicated."""
    strike = get_strike_for_review(db, review_id)
    if strike is None:
        try:
            with db.begin_nested():
                strike = ModerationStrike(review_id=review_id, user_id=author_id, issued_by_id=issued_by)
                db.add(strike)
            return strike
        except IntegrityError:
            logger.debug("Strike for review %s created concurrently, renewing instead", review_id)
            strike = get_strike_for_review(db, review_id)
            if strike is None:
                raise

    strike.revoked_at = None
    strike.issued_by_id = issued_by
    db.flush()
    return strike


def revoke_strike(db: Session, review_id: int, at: datetime) -> bool:
    """Revoke the review's active strike. Missing or already revoked is a no-op."""
    strike = get_strike_for_review(db, review_id)
    if strike is None or strike.revoked_at is not None:
        return False
    strike.revoked_at = at
    db.flush()
    return True


def active_strike_count(db: Session, author_id: int) -> int:
    """Number of unrevoked strikes held by an author."""
    return db.execute(
        select(func.count())
        .select_from(ModerationStrike)
        .where(ModerationStrike.user_id == author_id, ModerationStrike.revoked_at.is_(None))
    ).scalar_one()


def active_strike_counts(db: Session, author_ids: list[int]) -> dict[int, int]:
    """Active strike counts for many authors at once; authors without strikes map to 0."""
    if not author_ids:
        return {}
    rows = db.execute(
        select(ModerationStrike.user_id, func.count())
        .where(ModerationStrike.user_id.in_(author_ids), ModerationStrike.revoked_at.is_(None))
        .group_by(ModerationStrike.user_id)
    ).all()
    counts = {author_id: 0 for author_id in author_ids}
    counts.update({user_id: count for user_id, count in rows})
    return counts
