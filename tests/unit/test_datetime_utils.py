"""
Unit tests for hotel calendar utilities.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from front_desk.errors import ValidationError
from front_desk.utils.datetime import (
    add_days,
    count_nights,
    hotel_today,
    is_before_today,
    to_stay_date,
    utc_now,
    validate_stay,
)


@pytest.mark.unit
def test_utc_now_is_timezone_aware() -> None:
    """Test that utc_now returns an aware UTC datetime."""
    assert utc_now().tzinfo is not None
    assert utc_now().utcoffset().total_seconds() == 0  # type: ignore[union-attr]


@pytest.mark.unit
def test_hotel_today_uses_hotel_timezone() -> None:
    """Test that 03:00 UTC is still the previous day in Bogota."""
    assert hotel_today(datetime(2025, 3, 2, 3, 0, tzinfo=timezone.utc)) == date(2025, 3, 1)
    assert hotel_today(datetime(2025, 3, 2, 6, 0, tzinfo=timezone.utc)) == date(2025, 3, 2)


@pytest.mark.unit
def test_hotel_today_treats_naive_datetimes_as_utc() -> None:
    """Test that naive instants are interpreted as UTC."""
    assert hotel_today(datetime(2025, 3, 2, 3, 0)) == date(2025, 3, 1)


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2025, 3, 1), date(2025, 3, 1)),
        ("2025-03-01", date(2025, 3, 1)),
        (" 2025-03-01 ", date(2025, 3, 1)),
        ("2025-03-02T03:00:00Z", date(2025, 3, 1)),
        (datetime(2025, 3, 2, 3, 0, tzinfo=timezone.utc), date(2025, 3, 1)),
    ],
)
def test_to_stay_date(value: object, expected: date) -> None:
    """Test normalization of dates, ISO strings and legacy timestamps."""
    assert to_stay_date(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["not-a-date", "2025-13-40", 20250301, None])
def test_to_stay_date_rejects_malformed_values(value: object) -> None:
    """Test that malformed dates raise ValidationError."""
    with pytest.raises(ValidationError):
        to_stay_date(value)


@pytest.mark.unit
def test_validate_stay_returns_nights() -> None:
    """Test a valid stay range."""
    assert validate_stay("2025-03-01", "2025-03-04") == 3
    assert count_nights(date(2025, 3, 1), date(2025, 3, 2)) == 1


@pytest.mark.unit
@pytest.mark.parametrize("check_out", ["2025-03-01", "2025-02-27"])
def test_validate_stay_rejects_empty_or_inverted_ranges(check_out: str) -> None:
    """Test that check-out must be strictly after check-in."""
    with pytest.raises(ValidationError) as exc_info:
        validate_stay("2025-03-01", check_out)

    assert exc_info.value.details["check_in"] == "2025-03-01"


@pytest.mark.unit
def test_is_before_today() -> None:
    """Test the past-date check against the hotel day."""
    now = datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)

    assert is_before_today(date(2025, 3, 9), now) is True
    assert is_before_today(date(2025, 3, 10), now) is False


@pytest.mark.unit
def test_add_days_crosses_month_boundary() -> None:
    """Test calendar arithmetic used for credit validity."""
    assert add_days(date(2025, 3, 10), 30) == date(2025, 4, 9)
