"""Moderator API: reports, review visibility and suspension appeals."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gamebox.core.config import ModerationPolicy, get_moderation_policy
from gamebox.core.deps import require_admin
from gamebox.core.utils import clamp_limit
from gamebox.db.session import get_db
from gamebox.models.report import ReportStatus
from gamebox.models.suspension_appeal import SuspensionAppealStatus
from gamebox.models.user import User
from gamebox.schemas.moderation import (
    AppealItem,
    AppealListResponse,
    AppealStatusResponse,
    AppealStatusUpdate,
    HideReviewRequest,
    ModerationResponse,
    ReportAuthor,
    ReportItem,
    ReportListResponse,
    ReportReview,
    ReportStatusResponse,
    ReportStatusUpdate,
    UserSummary,
)
from gamebox.services.appeal_service import list_appeals, transition_appeal
from gamebox.services.moderation_service import hide_review, unhide_review
from gamebox.services.report_service import ReportListing, list_reports, transition_report

router = APIRouter(prefix="/admin", tags=["admin"])


def _parse_report_status(value: str | None) -> ReportStatus:
    """Unknown or missing values fall back to the OPEN tab."""
    normalized = (value or "OPEN").strip().upper()
    try:
        return ReportStatus(normalized)
    except ValueError:
        return ReportStatus.OPEN


def _parse_appeal_status(value: str | None) -> SuspensionAppealStatus:
    normalized = (value or "OPEN").strip().upper()
    try:
        return SuspensionAppealStatus(normalized)
    except ValueError:
        return SuspensionAppealStatus.OPEN


def _report_item(listing: ReportListing) -> ReportItem:
    report, review, author = listing.report, listing.review, listing.author
    return ReportItem(
        id=report.id,
        reason=report.reason,
        details=report.details,
        status=report.status,
        created_at=report.created_at,
        resolved_at=report.resolved_at,
        resolved_by_id=report.resolved_by_id,
        review=ReportReview(
            id=review.id,
            game_title=review.game_title,
            rating=review.rating,
            body=review.body,
            created_at=review.created_at,
            visibility_status=review.visibility_status,
            hidden_at=review.hidden_at,
            hidden_reason=review.hidden_reason,
            author=ReportAuthor(
                id=author.id,
                name=author.name,
                is_private=author.is_private,
                suspended_until=author.suspended_until,
                active_strike_count=listing.author_active_strike_count,
            ),
        ),
        reporter=UserSummary.model_validate(listing.reporter),
    )


@router.get("/reports", response_model=ReportListResponse)
def get_reports(
    status: str | None = Query(default="OPEN"),
    limit: int = Query(default=50),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """List reports in one status, newest first."""
    report_status = _parse_report_status(status)
    listings = list_reports(db, report_status, limit)
    return ReportListResponse(
        status=report_status,
        limit=clamp_limit(limit),
        items=[_report_item(listing) for listing in listings],
    )


@router.patch("/reports/{report_id}", response_model=ReportStatusResponse)
def patch_report(
    report_id: int,
    data: ReportStatusUpdate,
    db: Session = Depends(get_db),
    moderator: User = Depends(require_admin),
):
    """Resolve or dismiss an open report."""
    report = transition_report(db, report_id, data.status, moderator.id)
    return ReportStatusResponse(status=report.status)


@router.patch("/reviews/{review_id}/hide", response_model=ModerationResponse)
def hide(
    review_id: int,
    data: HideReviewRequest | None = None,
    db: Session = Depends(get_db),
    moderator: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_moderation_policy),
):
    """Hide a review and strike its author."""
    outcome = hide_review(db, review_id, moderator.id, policy, reason=data.reason if data else None)
    return ModerationResponse.model_validate(outcome)


@router.patch("/reviews/{review_id}/unhide", response_model=ModerationResponse)
def unhide(
    review_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_moderation_policy),
):
    """Restore a hidden review and revoke its strike."""
    outcome = unhide_review(db, review_id, policy)
    return ModerationResponse.model_validate(outcome)


@router.get("/appeals", response_model=AppealListResponse)
def get_appeals(
    status: str | None = Query(default="OPEN"),
    limit: int = Query(default=50),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """List suspension appeals with each user's current suspension."""
    appeal_status = _parse_appeal_status(status)
    rows = list_appeals(db, appeal_status, limit)
    return AppealListResponse(
        status=appeal_status,
        limit=clamp_limit(limit),
        items=[
            AppealItem(
                id=appeal.id,
                status=appeal.status,
                message=appeal.message,
                created_at=appeal.created_at,
                resolved_at=appeal.resolved_at,
                resolved_by_id=appeal.resolved_by_id,
                suspended_until=user.suspended_until,
                user=UserSummary.model_validate(user),
            )
            for appeal, user in rows
        ],
    )


@router.patch("/appeals/{appeal_id}", response_model=AppealStatusResponse)
def patch_appeal(
    appeal_id: int,
    data: AppealStatusUpdate,
    db: Session = Depends(get_db),
    moderator: User = Depends(require_admin),
):
    """Record a decision on an open appeal. Does not lift the suspension."""
    appeal = transition_appeal(db, appeal_id, data.status, moderator.id)
    return AppealStatusResponse(status=appeal.status)
