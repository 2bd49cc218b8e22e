"""Suspension escalator: derives a user's suspension window from active strikes."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from gamebox.core.errors import NotFoundError
from gamebox.core.utils import as_utc
from gamebox.models.user import User

logger = logging.getLogger(__name__)


def is_suspended(user: User, now: datetime | None = None) -> bool:
    """A user is suspended while ``suspended_until`` lies in the future."""
    until = as_utc(user.suspended_until)
    if until is None:
        return False
    return until > (now or datetime.now(timezone.utc))


def next_suspended_until(
    current: datetime | None,
    active_strike_count: int,
    strike_limit: int,
    suspension_days: int,
    now: datetime,
    escalate: bool = True,
    deescalate: bool = True,
) -> datetime | None:
    """Compute the new ``suspended_until``.

    At or above the limit the window becomes the later of the current value
    and ``now + suspension_days``; windows never shrink on escalation.
    Below the limit any suspension is cleared outright.
    """
    current = as_utc(current)
    if active_strike_count >= strike_limit:
        if not escalate:
            return current
        candidate = now + timedelta(days=suspension_days)
        if current is None or current < candidate:
            return candidate
        return current
    if current is not None and deescalate:
        return None
    return current


def reevaluate_suspension(
    db: Session,
    author_id: int,
    active_strike_count: int,
    strike_limit: int,
    suspension_days: int,
    now: datetime,
    escalate: bool = True,
    deescalate: bool = True,
) -> datetime | None:
    """Apply :func:`next_suspended_until` to the author's row inside the caller's transaction."""
    user = db.get(User, author_id)
    if not user:
        raise NotFoundError("User not found")

    current = as_utc(user.suspended_until)
    target = next_suspended_until(
        current,
        active_strike_count,
        strike_limit,
        suspension_days,
        now,
        escalate=escalate,
        deescalate=deescalate,
    )
    if target != current:
        if target is None:
            logger.info("Suspension lifted: user=%s strikes=%s limit=%s", author_id, active_strike_count, strike_limit)
        else:
            logger.info(
                "Suspension set: user=%s until=%s strikes=%s limit=%s",
                author_id,
                target.isoformat(),
                active_strike_count,
                strike_limit,
            )
        user.suspended_until = target
        db.flush()
    return target
