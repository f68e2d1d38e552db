"""Datetime utilities for database timestamps."""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return the current UTC time as a naive datetime.

    Timestamp columns are stored without timezone info and are always
    interpreted as UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ensure_aware(dt: datetime | None) -> datetime | None:
    """
    Convert naive datetime to aware UTC datetime.

    Datetimes read back from the database are naive but represent UTC;
    API responses serialize them as timezone-aware values.

    Args:
        dt: A datetime object, which may be naive or aware.

    Returns:
        A timezone-aware datetime in UTC, or None if input is None.

    Examples:
        >>> from datetime import datetime, timezone
        >>> naive_dt = datetime(2025, 1, 1, 12, 0)
        >>> aware_dt = ensure_aware(naive_dt)
        >>> aware_dt.tzinfo
        datetime.timezone.utc
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
