"""Review model."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from gamebox.db.base import Base


class ReviewVisibilityStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    HIDDEN = "HIDDEN"


class Review(Base):
    """A user's review of a catalog item.

    ``hidden_at``, ``hidden_reason`` and ``hidden_by_id`` are only set while
    the review is HIDDEN.
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    game_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visibility_status: Mapped[ReviewVisibilityStatus] = mapped_column(
        Enum(ReviewVisibilityStatus, name="review_visibility_status"),
        nullable=False,
        default=ReviewVisibilityStatus.ACTIVE,
        server_default=ReviewVisibilityStatus.ACTIVE.value,
    )
    hidden_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hidden_reason: Mapped[str | None] = mapped_column(String(200), nullable=True)
    hidden_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
