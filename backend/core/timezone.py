"""UTC time helpers.

Timestamps are stored as naive UTC in the database. Use now_utc() instead of
datetime.now() / datetime.utcnow() everywhere so comparisons against stored
values never mix aware and naive datetimes.
"""
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
