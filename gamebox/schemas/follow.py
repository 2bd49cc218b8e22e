"""Follow schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from gamebox.models.follow import FollowStatus
from gamebox.services.follow_service import FollowRequestAction, RelationshipStatus


class FollowMutationResponse(BaseModel):
    ok: bool = True
    status: RelationshipStatus
    follow_id: int | None
    requires_approval: bool = False

    model_config = {"from_attributes": True}


class FollowRequestDecision(BaseModel):
    action: FollowRequestAction


class FollowDecisionResponse(BaseModel):
    ok: bool = True
    status: RelationshipStatus
    follow_id: int

    model_config = {"from_attributes": True}


class FollowStatusResponse(BaseModel):
    status: RelationshipStatus
    follow_id: int | None
    can_view_private_profile: bool

    model_config = {"from_attributes": True}


class FollowCountersResponse(BaseModel):
    followers_count: int
    following_count: int

    model_config = {"from_attributes": True}


class FollowRequestItem(BaseModel):
    id: int
    follower_id: int
    following_id: int
    status: FollowStatus
    created_at: datetime

    model_config = {"from_attributes": True}
