"""End-user suspension appeal schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from gamebox.models.suspension_appeal import SuspensionAppealStatus


class AppealCreate(BaseModel):
    message: str | None = Field(default=None, max_length=500)


class AppealResponse(BaseModel):
    id: int
    user_id: int
    message: str | None
    status: SuspensionAppealStatus
    created_at: datetime

    model_config = {"from_attributes": True}
