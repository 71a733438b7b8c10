"""Timezone utilities.

Timestamps are stored in UTC. Some backends (SQLite) hand datetimes back
without tzinfo; those are interpreted as UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime.

    Naive values are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """Check whether an optional expiry lies in the past.

    Args:
        expires_at: Expiry timestamp, ``None`` meaning "never expires"
        now: Reference time (defaults to the current UTC time)

    Returns:
        True if ``expires_at`` is set and not strictly after ``now``
    """
    if expires_at is None:
        return False
    return as_utc(expires_at) <= (now or utc_now())
