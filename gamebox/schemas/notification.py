"""Notification schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from gamebox.models.notification import NotificationType


class NotificationItem(BaseModel):
    id: int
    type: NotificationType
    actor_id: int
    review_id: int | None
    follow_id: int | None
    created_at: datetime
    read_at: datetime | None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    unread_count: int
    items: list[NotificationItem]


class MarkReadResponse(BaseModel):
    updated: bool


class MarkAllReadResponse(BaseModel):
    updated_count: int
