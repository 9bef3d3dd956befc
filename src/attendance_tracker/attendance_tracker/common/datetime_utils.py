from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (a full ISO timestamp is cut to its date part)."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Ngày không hợp lệ: {value!r} (YYYY-MM-DD)")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` means UTC.

    Naive results are kept naive (wall-clock time in the office timezone).
    """
    text = (value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Thời gian không hợp lệ: {value!r}")


def now_utc() -> datetime:
    """Current instant (aware, UTC).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def to_db(value: Optional[datetime]) -> Optional[datetime]:
    """Aware instants are stored as naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
