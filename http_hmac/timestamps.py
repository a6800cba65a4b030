"""
Timestamp Functions
===================
Parsing and freshness checks for the signed timestamp header.
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional

from .exceptions import TimestampError


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_http_date(moment: Optional[datetime] = None) -> str:
    """Format a datetime as an RFC 7231 HTTP-date (``Tue, 01 Jan 2013 00:00:00 GMT``)."""
    moment = moment or utcnow()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a timestamp header value into an aware datetime.

    Accepts HTTP-dates, ISO 8601 strings and integer Unix epoch seconds.
    Naive values are taken to be UTC.

    Raises:
        TimestampError: if the value is empty or not understood
    """
    if not value or not value.strip():
        raise TimestampError("Missing timestamp", value)
    value = value.strip()

    if value.isdigit():
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise TimestampError("Epoch timestamp out of range", value)

    parsed = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise TimestampError("Unrecognized timestamp format", value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_within_skew(timestamp: datetime, allowed_skew: timedelta, now: Optional[datetime] = None) -> bool:
    """Check that ``|now - timestamp|`` does not exceed the allowed skew."""
    now = now or utcnow()
    return abs(now - timestamp) <= allowed_skew
