"""Moderator-facing schemas: reports, hide/unhide, appeals."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from gamebox.models.report import ReportReason, ReportStatus
from gamebox.models.review import ReviewVisibilityStatus
from gamebox.models.suspension_appeal import SuspensionAppealStatus


class UserSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ReportAuthor(UserSummary):
    is_private: bool
    suspended_until: datetime | None
    active_strike_count: int


class ReportReview(BaseModel):
    id: int
    game_title: str
    rating: int
    body: str
    created_at: datetime
    visibility_status: ReviewVisibilityStatus
    hidden_at: datetime | None
    hidden_reason: str | None
    author: ReportAuthor


class ReportItem(BaseModel):
    id: int
    reason: ReportReason
    details: str | None
    status: ReportStatus
    created_at: datetime
    resolved_at: datetime | None
    resolved_by_id: int | None
    review: ReportReview
    reporter: UserSummary


class ReportListResponse(BaseModel):
    status: ReportStatus
    limit: int
    items: list[ReportItem]


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class ReportStatusResponse(BaseModel):
    ok: bool = True
    status: ReportStatus


class HideReviewRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=200)


class ModerationResponse(BaseModel):
    ok: bool = True
    visibility_status: ReviewVisibilityStatus
    active_strike_count: int
    strike_limit: int
    suspended_until: datetime | None

    model_config = {"from_attributes": True}


class AppealItem(BaseModel):
    id: int
    status: SuspensionAppealStatus
    message: str | None
    created_at: datetime
    resolved_at: datetime | None
    resolved_by_id: int | None
    suspended_until: datetime | None
    user: UserSummary


class AppealListResponse(BaseModel):
    status: SuspensionAppealStatus
    limit: int
    items: list[AppealItem]


class AppealStatusUpdate(BaseModel):
    status: SuspensionAppealStatus


class AppealStatusResponse(BaseModel):
    ok: bool = True
    status: SuspensionAppealStatus
