"""Review reporting API."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gamebox.core.deps import require_active_user
from gamebox.db.session import get_db
from gamebox.models.user import User
from gamebox.schemas.review import ReportCreate, ReportCreateResponse
from gamebox.services.report_service import create_report

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("/{review_id}/reports", response_model=ReportCreateResponse, status_code=status.HTTP_201_CREATED)
def report_review(
    review_id: int,
    data: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_active_user),
):
    """Report someone else's review to the moderators."""
    report = create_report(db, current_user.id, review_id, data.reason, data.details)
    return ReportCreateResponse(report_id=report.id)
