"""
Business-day arithmetic.

Payments are bucketed on a fixed-offset clock (UTC-4 by default) that does
not follow the viewer's timezone. Every date shown, filtered on or grouped
by goes through `business_date`.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from dailyledger.core.config import BUSINESS_UTC_OFFSET_HOURS
from dailyledger.core.exceptions import ValidationError


def business_tz(offset_hours: int = BUSINESS_UTC_OFFSET_HOURS) -> timezone:
    """Fixed-offset timezone of the business clock."""
    return timezone(timedelta(hours=offset_hours))


def _to_business_clock(timestamp: datetime, offset_hours: int) -> datetime:
    # Naive timestamps are UTC
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(business_tz(offset_hours))


def business_date(timestamp: datetime, offset_hours: int = BUSINESS_UTC_OFFSET_HOURS) -> str:
    """
    Business day a timestamp belongs to, as YYYY-MM-DD.

    With the default offset this is the UTC date of `timestamp - 4 hours`.

    >>> business_date(datetime(2024, 5, 2, 3, 59, tzinfo=timezone.utc))
    '2024-05-01'
    """
    return _to_business_clock(timestamp, offset_hours).date().isoformat()


def business_time(timestamp: datetime, offset_hours: int = BUSINESS_UTC_OFFSET_HOURS) -> str:
    """Time of day on the business clock, as HH:MM."""
    return _to_business_clock(timestamp, offset_hours).strftime("%H:%M")


def business_today(
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
    now: datetime | None = None,
) -> str:
    """Today's business date."""
    return business_date(now or datetime.now(timezone.utc), offset_hours)


def parse_business_date(value: str) -> date:
    """Parse a YYYY-MM-DD business date."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid business date: {value!r}", details={"value": value}
        ) from None


def stamp_for_business_date(
    value: str,
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
    now: datetime | None = None,
) -> datetime:
    """
    Timestamp on a chosen business date at the current business time of day.

    Keeps "when during the day" from the real clock while letting the caller
    book the payment on another business date. The result always satisfies
    `business_date(result) == value`.
    """
    day = parse_business_date(value)
    current = _to_business_clock(now or datetime.now(timezone.utc), offset_hours)
    return datetime.combine(day, current.timetz())
