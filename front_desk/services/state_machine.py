"""
Booking status graph, guards and view predicates.

This module is the single source of truth for which statuses can follow which,
what blocks a check-in or check-out, and which bookings belong in the
check-in / check-out work lists. Transition code and list queries both call the
functions below so the two can never disagree.

Everything here is pure: bookings are any row or object exposing the booking
columns, and the reference day is passed in explicitly.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from front_desk.errors import InvalidStateTransition
from front_desk.models.enums import BookingStatus
from front_desk.schemas.financials import Financials
from front_desk.utils.datetime import to_stay_date

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.PAID, BookingStatus.CANCELLED}),
    BookingStatus.PAID: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
PRE_CHECK_IN_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.PAID}
)
AWAITING_ARRIVAL_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.PAID})

# Check-in readiness gates, in the order staff usually clear them
STEP_CLEAN_ROOM = "clean room"
STEP_VERIFY_INVENTORY = "verify inventory"
STEP_DELIVER_INVENTORY = "deliver inventory"
STEP_REGISTER_PASSENGERS = "register passengers"
STEP_COMPLETE_PAYMENT = "complete payment"
STEP_COLLECT_BALANCE = "collect pending balance"

READINESS_FLAGS: tuple[tuple[str, str], ...] = (
    ("room_clean", STEP_CLEAN_ROOM),
    ("inventory_verified", STEP_VERIFY_INVENTORY),
    ("inventory_delivered", STEP_DELIVER_INVENTORY),
    ("passengers_completed", STEP_REGISTER_PASSENGERS),
)


def status_of(booking: Any) -> BookingStatus:
    return BookingStatus(booking.status)


def can_transition(current: str, target: str) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_transition(current: str, target: str) -> None:
    """
    Raise unless ``target`` is reachable from ``current``.

    Raises:
        InvalidStateTransition: With both statuses attached
    """
    if not can_transition(current, target):
        raise InvalidStateTransition(current, BookingStatus(target).value)


def is_terminal(status: str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def payment_target(current: str, financials: Financials) -> BookingStatus:
    """
    Status a booking should hold given its payments.

    pending moves to confirmed once anything is paid; pending and confirmed
    move to paid once fully paid. Later statuses are never changed by payments.

    Args:
        current: Current status value
        financials: Fresh reconciliation

    Returns:
        Target status (may equal the current one)
    """
    status = BookingStatus(current)
    if status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
        return status
    if financials.is_fully_paid and financials.paid > 0:
        return BookingStatus.PAID
    if financials.paid > 0:
        return BookingStatus.CONFIRMED
    return status


def pending_check_in_steps(booking: Any, financials: Financials) -> list[str]:
    """
    Readiness steps still open for check-in.

    Args:
        booking: Booking row
        financials: Fresh reconciliation of the booking

    Returns:
        Unmet steps in a stable order; empty when check-in may proceed
    """
    steps = [step for flag, step in READINESS_FLAGS if not getattr(booking, flag)]
    if not financials.is_fully_paid:
        steps.append(STEP_COMPLETE_PAYMENT)
    return steps


def pending_check_out_steps(financials: Financials) -> list[str]:
    return [] if financials.is_fully_paid else [STEP_COLLECT_BALANCE]


def is_overdue(booking: Any, today: date) -> bool:
    """Past its scheduled check-out date while the guest never arrived."""
    return (
        status_of(booking) in AWAITING_ARRIVAL_STATUSES
        and to_stay_date(booking.check_out) < today
    )


def is_awaiting_check_in(booking: Any, today: date) -> bool:
    """Due to arrive: confirmed or paid, arrival day reached, not overdue."""
    return (
        status_of(booking) in AWAITING_ARRIVAL_STATUSES
        and to_stay_date(booking.check_in) <= today
        and not is_overdue(booking, today)
    )


def is_awaiting_check_out(booking: Any, today: date) -> bool:
    """In house, or overdue: both need staff action before the room is reused."""
    return status_of(booking) is BookingStatus.CHECKED_IN or is_overdue(booking, today)
