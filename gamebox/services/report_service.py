"""Report lifecycle: OPEN -> RESOLVED | DISMISSED."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from gamebox.core.errors import InvalidOperationError, NotFoundError
from gamebox.core.utils import clamp_limit, normalize_optional_text
from gamebox.db.session import commit_or_fail, get_for_update, storage_unit
from gamebox.models.notification import NotificationType
from gamebox.models.report import Report, ReportReason, ReportStatus
from gamebox.models.review import Review, ReviewVisibilityStatus
from gamebox.models.user import User
from gamebox.services.notification_service import ensure_unread_notification
from gamebox.services.strike_service import active_strike_counts

logger = logging.getLogger(__name__)

TERMINAL_REPORT_STATUSES = (ReportStatus.RESOLVED, ReportStatus.DISMISSED)


@dataclass
class ReportListing:
    report: Report
    review: Review
    author: User
    reporter: User
    author_active_strike_count: int


@storage_unit
def create_report(
    db: Session,
    reporter_id: int,
    review_id: int,
    reason: ReportReason,
    details: str | None = None,
) -> Report:
    """File a report against a visible review. Repeat reports are kept as separate rows."""
    review = db.get(Review, review_id)
    if not review or review.visibility_status != ReviewVisibilityStatus.ACTIVE:
        raise NotFoundError("Review not found")
    if review.user_id == reporter_id:
        raise InvalidOperationError("You cannot report your own review")

    report = Report(
        review_id=review_id,
        reporter_id=reporter_id,
        reason=reason,
        details=normalize_optional_text(details),
        status=ReportStatus.OPEN,
    )
    db.add(report)
    commit_or_fail(db)
    db.refresh(report)
    logger.info("Report filed: report=%s review=%s reason=%s", report.id, review_id, reason.value)
    return report


def list_reports(db: Session, status: ReportStatus = ReportStatus.OPEN, limit: int | None = 50) -> list[ReportListing]:
    """Reports in one status, newest first, with each author's active strike count."""
    safe_limit = clamp_limit(limit)
    rows = db.execute(
        select(Report)
        .where(Report.status == status)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .limit(safe_limit)
    ).scalars().all()

    reviews = {r.review_id: db.get(Review, r.review_id) for r in rows}
    author_ids = sorted({review.user_id for review in reviews.values() if review})
    counts = active_strike_counts(db, author_ids)

    listings = []
    for report in rows:
        review = reviews.get(report.review_id)
        if not review:
            continue
        listings.append(
            ReportListing(
                report=report,
                review=review,
                author=db.get(User, review.user_id),
                reporter=db.get(User, report.reporter_id),
                author_active_strike_count=counts.get(review.user_id, 0),
            )
        )
    return listings


@storage_unit
def transition_report(
    db: Session,
    report_id: int,
    target_status: ReportStatus,
    moderator_id: int,
    now: datetime | None = None,
) -> Report:
    """Close an OPEN report.

    Resolving notifies the reporter and, when the review is hidden, its
    author (never the acting moderator). Dismissing is silent.
    """
    if target_status not in TERMINAL_REPORT_STATUSES:
        raise InvalidOperationError(f"Cannot transition a report to {target_status.value}")

    report = get_for_update(db, Report, report_id)
    if not report:
        raise NotFoundError("Report not found")
    if report.status != ReportStatus.OPEN:
        raise InvalidOperationError(f"Report is already {report.status.value}")

    report.status = target_status
    report.resolved_at = now or datetime.now(timezone.utc)
    report.resolved_by_id = moderator_id
    db.flush()

    if target_status == ReportStatus.RESOLVED:
        # Serializes the unread dedup for notifications keyed on this review.
        review = get_for_update(db, Review, report.review_id)
        if report.reporter_id != moderator_id:
            ensure_unread_notification(
                db,
                recipient_id=report.reporter_id,
                actor_id=moderator_id,
                type=NotificationType.REPORT_RESOLVED,
                review_id=report.review_id,
            )
        if (
            review
            and review.visibility_status == ReviewVisibilityStatus.HIDDEN
            and review.user_id != moderator_id
        ):
            ensure_unread_notification(
                db,
                recipient_id=review.user_id,
                actor_id=moderator_id,
                type=NotificationType.REVIEW_MODERATED,
                review_id=report.review_id,
            )

    commit_or_fail(db)
    db.refresh(report)
    logger.info("Report %s -> %s by moderator=%s", report_id, target_status.value, moderator_id)
    return report
