"""Timezone utilities.

Single source of truth for timestamp handling. All timestamps inside the
core are timezone-aware UTC; naive values are assumed to already be UTC.
"""

from datetime import UTC, datetime

__all__ = [
    "now_utc",
    "to_utc",
    "to_iso",
    "parse_datetime",
]


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC.

    Naive datetimes are interpreted as UTC rather than local time so that
    values read back from SQLite compare consistently.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso(dt: datetime | None) -> str | None:
    """Serialize a datetime for storage (UTC, ISO 8601).

    Fixed microsecond precision keeps stored values lexicographically
    comparable in SQL.
    """
    if dt is None:
        return None
    return to_utc(dt).isoformat(timespec="microseconds")


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse a stored or wire timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings (including a trailing 'Z') and datetimes.

    Returns:
        Aware UTC datetime, or None for empty input
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))
