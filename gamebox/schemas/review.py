"""Review report schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from gamebox.models.report import ReportReason


class ReportCreate(BaseModel):
    reason: ReportReason
    details: str | None = Field(default=None, max_length=500)


class ReportCreateResponse(BaseModel):
    ok: bool = True
    report_id: int
