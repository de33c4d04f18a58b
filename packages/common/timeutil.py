"""UTC clock and ISO-8601 helpers.

Stores may hand back naive datetimes (SQLite drops tzinfo); everything read
from the store is treated as UTC.
"""

from __future__ import annotations

import datetime as _dt

__all__ = ["utcnow", "ensure_utc", "to_iso_utc"]


def utcnow() -> _dt.datetime:
    """Return the current wall-clock time as an aware UTC datetime."""
    return _dt.datetime.now(tz=_dt.timezone.utc)


def ensure_utc(value: _dt.datetime) -> _dt.datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=_dt.timezone.utc)
    return value.astimezone(_dt.timezone.utc)


def to_iso_utc(value: _dt.datetime | None) -> str | None:
    """Format a datetime as ISO-8601 UTC with a trailing 'Z' (None passes through)."""
    if value is None:
        return None
    return ensure_utc(value).isoformat().replace("+00:00", "Z")
