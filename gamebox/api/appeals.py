"""Suspension appeal API for the suspended user."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gamebox.core.deps import get_current_user
from gamebox.db.session import get_db
from gamebox.models.user import User
from gamebox.schemas.appeal import AppealCreate, AppealResponse
from gamebox.services.appeal_service import create_appeal
from gamebox.services.suspension_service import is_suspended

router = APIRouter(prefix="/appeals", tags=["appeals"])


@router.post("/me", response_model=AppealResponse, status_code=status.HTTP_201_CREATED)
def appeal_my_suspension(
    data: AppealCreate | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Ask moderators to review the current user's suspension."""
    if not is_suspended(current_user):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="account_not_suspended")
    return create_appeal(db, current_user.id, data.message if data else None)
