"""Small helpers shared by services."""

from __future__ import annotations

from datetime import datetime, timezone


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def clamp_limit(limit: int | None, default: int = 50, maximum: int = 100) -> int:
    """Cap a page size at maximum. None, zero or negative means default."""
    if limit is None or limit <= 0:
        return default
    return min(limit, maximum)


def normalize_optional_text(value: str | None) -> str | None:
    """Trim free text; blank becomes None."""
    if not value:
        return None
    normalized = value.strip()
    return normalized or None
