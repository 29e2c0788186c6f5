# src/chatline/db/time.py
"""Time utilities for database models and payload serialization."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def isoformat(value: datetime | None) -> str | None:
    """Render a stored timestamp as an ISO-8601 UTC string."""
    normalized = as_utc(value)
    return normalized.isoformat() if normalized is not None else None
