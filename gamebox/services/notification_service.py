"""Notification dedup engine and the notification read surface."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from gamebox.core.utils import clamp_limit
from gamebox.db.session import storage_unit
from gamebox.models.notification import Notification, NotificationType


def _key_clause(column, value: int | None):
    return column.is_(None) if value is None else column == value


def find_unread_notification(
    db: Session,
    recipient_id: int,
    actor_id: int,
    type: NotificationType,
    review_id: int | None = None,
    follow_id: int | None = None,
) -> Notification | None:
    """Find the unread notification for this (recipient, actor, keys, type), if any."""
    stmt = (
        select(Notification)
        .where(
            Notification.recipient_id == recipient_id,
            Notification.actor_id == actor_id,
            Notification.type == type,
            Notification.read_at.is_(None),
            _key_clause(Notification.review_id, review_id),
            _key_clause(Notification.follow_id, follow_id),
        )
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def ensure_unread_notification(
    db: Session,
    recipient_id: int,
    actor_id: int,
    type: NotificationType,
    review_id: int | None = None,
    follow_id: int | None = None,
) -> Notification:
    """Insert a notification unless an identical unread one already exists.

    Runs inside the caller's transaction and never commits. Once the
    existing row is read, the next qualifying event creates a fresh one.
    """
    existing = find_unread_notification(db, recipient_id, actor_id, type, review_id, follow_id)
    if existing:
        return existing

    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        type=type,
        review_id=review_id,
        follow_id=follow_id,
    )
    db.add(notification)
    db.flush()
    return notification


def mark_follow_notifications_read(
    db: Session,
    recipient_id: int,
    follow_id: int,
    type: NotificationType,
    at: datetime,
) -> int:
    """Mark unread notifications about a follow as read. Returns rows touched."""
    result = db.execute(
        update(Notification)
        .where(
            Notification.recipient_id == recipient_id,
            Notification.follow_id == follow_id,
            Notification.type == type,
            Notification.read_at.is_(None),
        )
        .values(read_at=at)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount


def delete_follow_notifications(db: Session, follow_id: int) -> None:
    """Drop notifications tied to a follow row that is about to be deleted.

    Same effect as the follow_id FK's ON DELETE CASCADE, which SQLite does
    not enforce without the foreign_keys pragma. Read and unread rows go
    together: a notification must never point at a missing follow.
    """
    db.execute(
        delete(Notification)
        .where(Notification.follow_id == follow_id)
        .execution_options(synchronize_session="fetch")
    )


def list_notifications(db: Session, user_id: int, limit: int | None = 20) -> tuple[list[Notification], int]:
    """Newest notifications for a user plus their unread count."""
    safe_limit = clamp_limit(limit, default=20)
    items = db.execute(
        select(Notification)
        .where(Notification.recipient_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(safe_limit)
    ).scalars().all()
    unread = db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == user_id, Notification.read_at.is_(None))
    ).scalar_one()
    return list(items), unread


@storage_unit
def mark_notification_read(db: Session, user_id: int, notification_id: int) -> bool:
    """Mark one of the user's notifications read. False if nothing changed."""
    result = db.execute(
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.recipient_id == user_id,
            Notification.read_at.is_(None),
        )
        .values(read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount > 0


@storage_unit
def mark_all_notifications_read(db: Session, user_id: int) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == user_id, Notification.read_at.is_(None))
        .values(read_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
