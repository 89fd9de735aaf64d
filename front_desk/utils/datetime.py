"""
Hotel calendar utilities.

Stay dates are calendar days in the hotel's timezone. Every function that
compares against "today" takes the reference instant explicitly so callers and
tests never depend on ambient system time.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from front_desk.config import HOTEL_TIMEZONE
from front_desk.errors import ValidationError


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This is the only place that reads the system clock; services receive its
    result as an explicit ``now`` argument.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo is not None
        True
    """
    return datetime.now(timezone.utc)


def hotel_zone() -> ZoneInfo:
    return ZoneInfo(HOTEL_TIMEZONE)


def hotel_today(now: datetime) -> date:
    """
    Calendar day of ``now`` in the hotel timezone.

    Naive datetimes are interpreted as UTC.

    Args:
        now: Reference instant

    Returns:
        Hotel-local calendar date

    Example:
        >>> hotel_today(datetime(2025, 3, 2, 3, 0, tzinfo=timezone.utc))  # Bogota is UTC-5
        datetime.date(2025, 3, 1)
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(hotel_zone()).date()


def to_stay_date(value: Any) -> date:
    """
    Normalize a stay date to a hotel calendar day.

    Legacy rows stored check-in/check-out as timestamps; those are converted to
    the hotel day they fall on rather than truncated in UTC.

    Args:
        value: date, datetime, ISO "YYYY-MM-DD" string or ISO timestamp string

    Returns:
        Calendar date

    Raises:
        ValidationError: If value cannot be read as a date
    """
    if isinstance(value, datetime):
        return hotel_today(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = date_parser.isoparse(text)
        except (ValueError, OverflowError) as e:
            raise ValidationError(f"Malformed date: {value!r}") from e
        # Bare dates are already calendar days; timestamps map to the hotel day
        return parsed.date() if len(text) <= 10 else hotel_today(parsed)
    raise ValidationError(f"Malformed date: {value!r}")


def count_nights(check_in: date, check_out: date) -> int:
    """Whole days between two calendar dates."""
    return (check_out - check_in).days


def validate_stay(check_in: Any, check_out: Any) -> int:
    """
    Validate a stay range and return its number of nights.

    Args:
        check_in: Arrival date
        check_out: Departure date

    Returns:
        Nights, always >= 1

    Raises:
        ValidationError: If dates are malformed or check-out is not after check-in
    """
    start = to_stay_date(check_in)
    end = to_stay_date(check_out)
    nights = count_nights(start, end)
    if nights < 1:
        raise ValidationError(
            "Check-out date must be after check-in date",
            check_in=start.isoformat(),
            check_out=end.isoformat(),
        )
    return nights


def is_before_today(day: date, now: datetime) -> bool:
    """True when ``day`` is strictly before the hotel's current day."""
    return to_stay_date(day) < hotel_today(now)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)
