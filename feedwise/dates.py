"""
Timestamp helpers.

All timestamps are stored as timezone-aware UTC datetimes serialized with
isoformat(). Feed dates arrive in many shapes (struct_time from feedparser,
RFC 822 / ISO strings, naive datetimes) and are normalized here.
"""

import calendar
import time
from datetime import datetime, timezone

from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: str | time.struct_time | datetime | None) -> datetime | None:
    """
    Parse a feed date into an aware UTC datetime.

    Returns None when the value is absent or cannot be parsed.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, time.struct_time):
        try:
            return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
        except (OverflowError, ValueError):
            return None

    text = str(value).strip()
    if not text:
        return None
    try:
        return ensure_utc(date_parser.parse(text))
    except (ValueError, OverflowError):
        return None


def from_db(value: str | None) -> datetime | None:
    """Read an isoformat timestamp column."""
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def to_db(value: datetime | None) -> str | None:
    """Serialize a timestamp for storage."""
    return ensure_utc(value).isoformat() if value else None


def http_date(value: datetime) -> str:
    """Format a timestamp for an If-Modified-Since header."""
    return ensure_utc(value).strftime("%a, %d %b %Y %H:%M:%S GMT")
