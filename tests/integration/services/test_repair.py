"""
Integration tests for legacy booking detection and repair.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from front_desk.db.readers.bookings import get_booking, get_credits
from front_desk.errors import ConflictError, InvalidStateTransition, ValidationError
from front_desk.services import repair
from front_desk.services.booking_lifecycle import BookingLifecycle


@pytest.fixture
def legacy_cancelled(make_booking: Callable[..., int], add_payment: Callable[..., int], today: date) -> int:
    """Cancelled booking paid in full, written without a credit."""
    booking_id = make_booking(
        status="cancelled",
        check_in=today - timedelta(days=5),
        check_out=today - timedelta(days=3),
    )
    add_payment(booking_id, "150000")
    return booking_id


@pytest.mark.integration
def test_finds_fully_paid_cancellation(db_engine: Engine, legacy_cancelled: int) -> None:
    """Test detection of a cancelled booking whose payments cover the stay."""
    with db_engine.connect() as conn:
        found = repair.find_cancelled_fully_paid(conn)

    assert [a["booking_id"] for a in found] == [legacy_cancelled]
    anomaly = found[0]
    assert anomaly["anomaly"] == repair.CANCELLED_FULLY_PAID
    assert anomaly["financials"].is_fully_paid is True
    assert repair.suggest_reclassification(anomaly) == "paid"


@pytest.mark.integration
def test_guarded_cancellation_is_not_reported(
    lifecycle: BookingLifecycle,
    db_engine: Engine,
    make_booking: Callable[..., int],
    add_payment: Callable[..., int],
    now: datetime,
) -> None:
    """Test that cancellations carrying a credit are not anomalies."""
    booking_id = make_booking(status="paid")
    add_payment(booking_id, "150000")
    lifecycle.cancel(booking_id, "Changed plans", now)

    with db_engine.connect() as conn:
        assert repair.find_cancelled_fully_paid(conn) == []
        assert repair.find_cancelled_without_credit(conn) == []


@pytest.mark.integration
def test_finds_partially_paid_cancellation_without_credit(
    db_engine: Engine, make_booking: Callable[..., int], add_payment: Callable[..., int]
) -> None:
    """Test that money held without a credit is reported even when not fully paid."""
    booking_id = make_booking(status="cancelled")
    add_payment(booking_id, "50000")
    make_booking(status="cancelled")

    with db_engine.connect() as conn:
        assert repair.find_cancelled_fully_paid(conn) == []
        found = repair.find_cancelled_without_credit(conn)

    assert [a["booking_id"] for a in found] == [booking_id]
    assert repair.suggest_reclassification(found[0]) is None


@pytest.mark.integration
def test_suggestions_follow_actual_timestamps(
    db_engine: Engine, make_booking: Callable[..., int], add_payment: Callable[..., int], now: datetime
) -> None:
    """Test that stays with real check-in or check-out keep them."""
    stayed = make_booking(status="cancelled", actual_check_in=now, actual_check_out=now)
    in_house = make_booking(status="cancelled", actual_check_in=now)
    add_payment(stayed, "150000")
    add_payment(in_house, "150000")

    with db_engine.connect() as conn:
        suggestions = {
            a["booking_id"]: repair.suggest_reclassification(a)
            for a in repair.find_cancelled_fully_paid(conn)
        }

    assert suggestions == {stayed: "completed", in_house: "checked-in"}


@pytest.mark.integration
def test_finds_completed_without_check_out(
    db_engine: Engine, make_booking: Callable[..., int], add_payment: Callable[..., int], now: datetime
) -> None:
    """Test detection of completed bookings that never checked out."""
    paid = make_booking(status="completed")
    add_payment(paid, "150000")
    unpaid = make_booking(status="completed")
    make_booking(status="completed", actual_check_out=now)

    with db_engine.connect() as conn:
        suggestions = {
            a["booking_id"]: repair.suggest_reclassification(a)
            for a in repair.find_completed_without_checkout(conn)
        }

    assert suggestions == {paid: "paid", unpaid: "confirmed"}


@pytest.mark.integration
def test_reclassify_writes_status_and_note(db_engine: Engine, legacy_cancelled: int, now: datetime) -> None:
    """Test applying a suggested status."""
    with db_engine.begin() as conn:
        repair.reclassify(conn, legacy_cancelled, "cancelled", "paid", 1, "Paid in full, never stayed", now)

    with db_engine.connect() as conn:
        booking = get_booking(conn, legacy_cancelled)
        assert booking.status == "paid"
        assert booking.cancellation_notes == "[repair 2025-03-10] Paid in full, never stayed"
        assert repair.find_cancelled_fully_paid(conn) == []


@pytest.mark.integration
def test_reclassify_is_optimistic(db_engine: Engine, legacy_cancelled: int, now: datetime) -> None:
    """Test that a booking changed since detection is left alone."""
    with db_engine.begin() as conn:
        with pytest.raises(InvalidStateTransition):
            repair.reclassify(conn, legacy_cancelled, "completed", "paid", 1, "Stale", now)
        with pytest.raises(ValidationError):
            repair.reclassify(conn, legacy_cancelled, "cancelled", "archived", 1, "Typo", now)
        with pytest.raises(ValidationError):
            repair.reclassify(conn, legacy_cancelled, "cancelled", "paid", 1, "", now)


@pytest.mark.integration
def test_issue_missing_credit(db_engine: Engine, legacy_cancelled: int, now: datetime, today: date) -> None:
    """Test issuing the credit a legacy cancellation never received, once."""
    with db_engine.begin() as conn:
        credit_id = repair.issue_missing_credit(conn, legacy_cancelled, actor=1, now=now, validity_days=30)

    with db_engine.connect() as conn:
        credits = get_credits(conn, legacy_cancelled)
    assert [c.id for c in credits] == [credit_id]
    assert credits[0].amount == Decimal("150000")
    assert credits[0].valid_until == today + timedelta(days=30)

    with db_engine.begin() as conn:
        with pytest.raises(ConflictError) as exc_info:
            repair.issue_missing_credit(conn, legacy_cancelled, actor=1, now=now)
    assert exc_info.value.code == "CREDIT_EXISTS"


@pytest.mark.integration
def test_issue_missing_credit_guards(db_engine: Engine, make_booking: Callable[..., int], now: datetime) -> None:
    """Test that credits need a cancelled booking holding money."""
    unpaid = make_booking(status="cancelled")
    active = make_booking(status="confirmed")

    with db_engine.begin() as conn:
        with pytest.raises(ConflictError) as exc_info:
            repair.issue_missing_credit(conn, unpaid, actor=1, now=now)
        assert exc_info.value.code == "NOTHING_PAID"
        with pytest.raises(InvalidStateTransition):
            repair.issue_missing_credit(conn, active, actor=1, now=now)
