"""Notification feed API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gamebox.core.deps import get_current_user
from gamebox.db.session import commit_or_fail, get_db
from gamebox.models.user import User
from gamebox.schemas.notification import (
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationItem,
    NotificationListResponse,
)
from gamebox.services.notification_service import (
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/me", response_model=NotificationListResponse)
def my_notifications(
    limit: int = Query(default=20),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Newest notifications for the current user."""
    items, unread = list_notifications(db, current_user.id, limit)
    return NotificationListResponse(
        unread_count=unread,
        items=[NotificationItem.model_validate(n) for n in items],
    )


@router.patch("/read-all", response_model=MarkAllReadResponse)
def read_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = mark_all_notifications_read(db, current_user.id)
    commit_or_fail(db)
    return MarkAllReadResponse(updated_count=count)


@router.patch("/{notification_id}/read", response_model=MarkReadResponse)
def read_one(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = mark_notification_read(db, current_user.id, notification_id)
    commit_or_fail(db)
    return MarkReadResponse(updated=updated)
