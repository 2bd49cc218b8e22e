"""Suspension appeal workflow: OPEN -> RESOLVED | REJECTED.

Resolving an appeal records the decision only; it never touches the
user's ``suspended_until``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from gamebox.core.errors import InvalidOperationError, NotFoundError
from gamebox.core.utils import clamp_limit, normalize_optional_text
from gamebox.db.session import commit_or_fail, get_for_update, storage_unit
from gamebox.models.suspension_appeal import SuspensionAppeal, SuspensionAppealStatus
from gamebox.models.user import User

logger = logging.getLogger(__name__)

TERMINAL_APPEAL_STATUSES = (SuspensionAppealStatus.RESOLVED, SuspensionAppealStatus.REJECTED)


@storage_unit
def create_appeal(db: Session, user_id: int, message: str | None = None) -> SuspensionAppeal:
    appeal = SuspensionAppeal(
        user_id=user_id,
        message=normalize_optional_text(message),
        status=SuspensionAppealStatus.OPEN,
    )
    db.add(appeal)
    commit_or_fail(db)
    db.refresh(appeal)
    logger.info("Appeal filed: appeal=%s user=%s", appeal.id, user_id)
    return appeal


def list_appeals(
    db: Session,
    status: SuspensionAppealStatus = SuspensionAppealStatus.OPEN,
    limit: int | None = 50,
) -> list[tuple[SuspensionAppeal, User]]:
    """Appeals in one status with the appellant as currently stored (live suspension)."""
    safe_limit = clamp_limit(limit)
    rows = db.execute(
        select(SuspensionAppeal, User)
        .join(User, User.id == SuspensionAppeal.user_id)
        .where(SuspensionAppeal.status == status)
        .order_by(SuspensionAppeal.created_at.desc(), SuspensionAppeal.id.desc())
        .limit(safe_limit)
    ).all()
    return [(appeal, user) for appeal, user in rows]


@storage_unit
def transition_appeal(
    db: Session,
    appeal_id: int,
    target_status: SuspensionAppealStatus,
    moderator_id: int,
    now: datetime | None = None,
) -> SuspensionAppeal:
    if target_status not in TERMINAL_APPEAL_STATUSES:
        raise InvalidOperationError(f"Cannot transition an appeal to {target_status.value}")

    appeal = get_for_update(db, SuspensionAppeal, appeal_id)
    if not appeal:
        raise NotFoundError("Appeal not found")
    if appeal.status != SuspensionAppealStatus.OPEN:
        raise InvalidOperationError(f"Appeal is already {appeal.status.value}")

    appeal.status = target_status
    appeal.resolved_at = now or datetime.now(timezone.utc)
    appeal.resolved_by_id = moderator_id
    commit_or_fail(db)
    db.refresh(appeal)
    logger.info("Appeal %s -> %s by moderator=%s", appeal_id, target_status.value, moderator_id)
    return appeal
