"""
Core Utilities

Shared helpers used across the application.
"""
from datetime import date, datetime, timezone, tzinfo


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """
    Express a timestamp in the shipping time reference.

    Naive timestamps are taken to already be in that reference.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def sunday_weekday(day: date) -> int:
    """Weekday number with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7
