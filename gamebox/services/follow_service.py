"""Follow relationship state machine with private-account gating."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gamebox.core.errors import ForbiddenError, InvalidOperationError, NotFoundError
from gamebox.db.session import commit_or_fail, get_for_update, storage_unit
from gamebox.models.follow import Follow, FollowStatus
from gamebox.models.notification import NotificationType
from gamebox.models.user import User
from gamebox.services.notification_service import (
    delete_follow_notifications,
    ensure_unread_notification,
    mark_follow_notifications_read,
)

logger = logging.getLogger(__name__)


class RelationshipStatus(str, enum.Enum):
    NONE = "NONE"
    SELF = "SELF"
    REQUESTED = "REQUESTED"
    FOLLOWING = "FOLLOWING"


class FollowRequestAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass
class FollowResult:
    status: RelationshipStatus
    follow_id: int | None
    requires_approval: bool = False


@dataclass
class ViewerFollowStatus:
    status: RelationshipStatus
    follow_id: int | None
    can_view_private_profile: bool


@dataclass
class FollowCounters:
    followers_count: int
    following_count: int


def derive_relationship(status: FollowStatus | None, is_self: bool) -> RelationshipStatus:
    """Map a stored follow row (or its absence) to the viewer-facing relationship."""
    if is_self:
        return RelationshipStatus.SELF
    if status == FollowStatus.ACCEPTED:
        return RelationshipStatus.FOLLOWING
    if status == FollowStatus.PENDING:
        return RelationshipStatus.REQUESTED
    return RelationshipStatus.NONE


def get_follow(db: Session, follower_id: int, following_id: int) -> Follow | None:
    return db.execute(
        select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    ).scalar_one_or_none()


def get_viewer_follow_status(db: Session, viewer_id: int | None, target_id: int) -> ViewerFollowStatus:
    if viewer_id is None:
        return ViewerFollowStatus(RelationshipStatus.NONE, None, False)
    if viewer_id == target_id:
        return ViewerFollowStatus(RelationshipStatus.SELF, None, True)

    follow = get_follow(db, viewer_id, target_id)
    status = derive_relationship(follow.status if follow else None, False)
    return ViewerFollowStatus(
        status=status,
        follow_id=follow.id if follow else None,
        can_view_private_profile=status == RelationshipStatus.FOLLOWING,
    )


def _continue_existing(db: Session, follow_id: int, target_is_private: bool) -> FollowResult:
    """Resolve a follow() call against a row that already exists.

    Holds the follow row lock until commit; the unread dedup below relies on it.
    """
    follow = get_for_update(db, Follow, follow_id)
    if follow is None:
        raise InvalidOperationError("Follow was removed concurrently")
    if follow.status == FollowStatus.ACCEPTED:
        return FollowResult(RelationshipStatus.FOLLOWING, follow_id, False)

    if target_is_private:
        ensure_unread_notification(
            db,
            recipient_id=follow.following_id,
            actor_id=follow.follower_id,
            type=NotificationType.FOLLOW_REQUEST,
            follow_id=follow.id,
        )
        commit_or_fail(db)
        return FollowResult(RelationshipStatus.REQUESTED, follow_id, True)

    # Target went public after the request was made: approval is no longer needed.
    follow.status = FollowStatus.ACCEPTED
    db.flush()
    mark_follow_notifications_read(
        db,
        recipient_id=follow.following_id,
        follow_id=follow.id,
        type=NotificationType.FOLLOW_REQUEST,
        at=datetime.now(timezone.utc),
    )
    ensure_unread_notification(
        db,
        recipient_id=follow.following_id,
        actor_id=follow.follower_id,
        type=NotificationType.FOLLOW_CREATED,
        follow_id=follow.id,
    )
    commit_or_fail(db)
    logger.info("Pending follow %s auto-accepted, target is public", follow_id)
    return FollowResult(RelationshipStatus.FOLLOWING, follow_id, False)


@storage_unit
def follow_user(db: Session, follower_id: int, target_id: int) -> FollowResult:
    """Follow a user, or request to when the target is private."""
    if follower_id == target_id:
        raise InvalidOperationError("You cannot follow yourself")

    target = db.get(User, target_id)
    if not target:
        raise NotFoundError("User not found")
    target_is_private = bool(target.is_private)

    existing = get_follow(db, follower_id, target_id)
    if existing:
        return _continue_existing(db, existing.id, target_is_private)

    desired = FollowStatus.PENDING if target_is_private else FollowStatus.ACCEPTED
    follow = Follow(follower_id=follower_id, following_id=target_id, status=desired)
    try:
        with db.begin_nested():
            db.add(follow)
    except IntegrityError:
        # Lost the race on (follower_id, following_id); the other writer's row wins.
        logger.debug("Follow %s -> %s created concurrently", follower_id, target_id)
        existing = get_follow(db, follower_id, target_id)
        if existing is None:
            raise
        return _continue_existing(db, existing.id, target_is_private)

    ensure_unread_notification(
        db,
        recipient_id=target_id,
        actor_id=follower_id,
        type=NotificationType.FOLLOW_REQUEST if target_is_private else NotificationType.FOLLOW_CREATED,
        follow_id=follow.id,
    )
    follow_id = follow.id
    commit_or_fail(db)
    logger.info("Follow %s -> %s created as %s", follower_id, target_id, desired.value)

    if target_is_private:
        return FollowResult(RelationshipStatus.REQUESTED, follow_id, True)
    return FollowResult(RelationshipStatus.FOLLOWING, follow_id, False)


@storage_unit
def unfollow_user(db: Session, follower_id: int, target_id: int) -> FollowResult:
    """Remove the follow row (accepted or pending). Always ends in NONE."""
    if follower_id == target_id:
        raise InvalidOperationError("You cannot unfollow yourself")

    existing = get_follow(db, follower_id, target_id)
    if existing:
        delete_follow_notifications(db, existing.id)
        db.delete(existing)
        commit_or_fail(db)
        logger.info("Follow %s -> %s removed", follower_id, target_id)
    return FollowResult(RelationshipStatus.NONE, None, False)


@storage_unit
def respond_to_follow_request(
    db: Session,
    current_user_id: int,
    follow_id: int,
    action: FollowRequestAction,
) -> FollowResult:
    """Accept or reject a pending request. Only the requested user may decide."""
    follow = get_for_update(db, Follow, follow_id)
    if not follow:
        raise NotFoundError("Follow request not found")
    if follow.following_id != current_user_id:
        raise ForbiddenError("Only the requested user can respond")
    if follow.status != FollowStatus.PENDING:
        raise InvalidOperationError("Follow request is no longer pending")

    if action == FollowRequestAction.ACCEPT:
        follow.status = FollowStatus.ACCEPTED
        db.flush()
        mark_follow_notifications_read(
            db,
            recipient_id=current_user_id,
            follow_id=follow.id,
            type=NotificationType.FOLLOW_REQUEST,
            at=datetime.now(timezone.utc),
        )
        ensure_unread_notification(
            db,
            recipient_id=follow.follower_id,
            actor_id=current_user_id,
            type=NotificationType.FOLLOW_ACCEPTED,
            follow_id=follow.id,
        )
        commit_or_fail(db)
        logger.info("Follow request %s accepted", follow_id)
        return FollowResult(RelationshipStatus.FOLLOWING, follow_id, False)

    delete_follow_notifications(db, follow.id)
    db.delete(follow)
    commit_or_fail(db)
    logger.info("Follow request %s rejected", follow_id)
    return FollowResult(RelationshipStatus.NONE, follow_id, False)


def list_pending_requests(db: Session, user_id: int) -> list[Follow]:
    """Pending requests waiting on this user's decision, newest first."""
    result = db.execute(
        select(Follow)
        .where(Follow.following_id == user_id, Follow.status == FollowStatus.PENDING)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return list(result.scalars().all())


def follow_counters(db: Session, user_id: int) -> FollowCounters:
    followers = db.execute(
        select(func.count())
        .select_from(Follow)
        .where(Follow.following_id == user_id, Follow.status == FollowStatus.ACCEPTED)
    ).scalar_one()
    following = db.execute(
        select(func.count())
        .select_from(Follow)
        .where(Follow.follower_id == user_id, Follow.status == FollowStatus.ACCEPTED)
    ).scalar_one()
    return FollowCounters(followers_count=followers, following_count=following)
