"""Follow graph API."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gamebox.core.deps import get_current_user, require_active_user
from gamebox.db.session import get_db
from gamebox.models.user import User
from gamebox.schemas.follow import (
    FollowCountersResponse,
    FollowDecisionResponse,
    FollowMutationResponse,
    FollowRequestDecision,
    FollowRequestItem,
    FollowStatusResponse,
)
from gamebox.services.follow_service import (
    follow_counters,
    follow_user,
    get_viewer_follow_status,
    list_pending_requests,
    respond_to_follow_request,
    unfollow_user,
)

router = APIRouter(prefix="/follows", tags=["follows"])


@router.get("/requests", response_model=list[FollowRequestItem])
def pending_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Follow requests waiting on the current user."""
    return list_pending_requests(db, current_user.id)


@router.patch("/requests/{follow_id}", response_model=FollowDecisionResponse)
def decide_request(
    follow_id: int,
    data: FollowRequestDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_active_user),
):
    """Accept or reject a pending follow request addressed to the current user."""
    return respond_to_follow_request(db, current_user.id, follow_id, data.action)


@router.get("/{user_id}", response_model=FollowStatusResponse)
def follow_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Relationship between the current user and another user."""
    return get_viewer_follow_status(db, current_user.id, user_id)


@router.get("/{user_id}/counters", response_model=FollowCountersResponse)
def counters(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return follow_counters(db, user_id)


@router.post("/{user_id}", response_model=FollowMutationResponse)
def follow(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_active_user),
):
    """Follow a user, or send a request if their account is private."""
    return follow_user(db, current_user.id, user_id)


@router.delete("/{user_id}", response_model=FollowMutationResponse)
def unfollow(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_active_user),
):
    """Unfollow a user or cancel a pending request."""
    return unfollow_user(db, current_user.id, user_id)
