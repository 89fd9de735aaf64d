"""
One-time repair of legacy booking rows written outside the guarded state machine.

Two anomalies are detected:

- cancelled bookings whose payments cover the full payable amount (or that
  hold money without a credit), and
- completed bookings that never recorded an actual check-out.

Detection is read-only. ``suggest_reclassification`` offers a default policy,
but nothing is rewritten unless an operator applies it through ``reclassify``
(see scripts/repair_legacy_bookings.py).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Row

from front_desk.config import CREDIT_VALIDITY_DAYS
from front_desk.db.readers.bookings import (
    count_credits,
    get_booking,
    get_extra_charges,
    get_payments,
    list_bookings_by_status,
)
from front_desk.db.writers.bookings import insert_credit, update_booking_status
from front_desk.errors import ConflictError, InvalidStateTransition, NotFoundError, ValidationError
from front_desk.models.enums import BookingStatus, CreditStatus
from front_desk.schemas.financials import Financials
from front_desk.services.reconciliation import reconcile
from front_desk.utils.datetime import add_days, hotel_today, to_stay_date

logger = structlog.get_logger(__name__)

CANCELLED_FULLY_PAID = "cancelled_fully_paid"
CANCELLED_WITHOUT_CREDIT = "cancelled_without_credit"
COMPLETED_WITHOUT_CHECKOUT = "completed_without_checkout"


def _financials(conn: Connection, booking: Row) -> Financials:
    return reconcile(booking, get_payments(conn, booking.id), get_extra_charges(conn, booking.id))


def _anomaly(code: str, booking: Row, financials: Financials) -> dict[str, Any]:
    return {
        "anomaly": code,
        "booking_id": booking.id,
        "status": booking.status,
        "room_number": booking.room_number,
        "check_in": to_stay_date(booking.check_in),
        "check_out": to_stay_date(booking.check_out),
        "actual_check_in": booking.actual_check_in,
        "actual_check_out": booking.actual_check_out,
        "financials": financials,
    }


def find_cancelled_fully_paid(conn: Connection) -> list[dict[str, Any]]:
    """
    Cancelled bookings whose accepted payments cover the whole payable amount.

    Cancellations that went through the guarded path carry a credit and are
    not reported.

    Args:
        conn: Active connection

    Returns:
        Anomaly dicts (booking fields plus financials)
    """
    found = []
    for booking in list_bookings_by_status(conn, [BookingStatus.CANCELLED.value]):
        financials = _financials(conn, booking)
        if (
            financials.paid > 0
            and financials.paid >= financials.payable
            and count_credits(conn, booking.id) == 0
        ):
            found.append(_anomaly(CANCELLED_FULLY_PAID, booking, financials))
    return found


def find_cancelled_without_credit(conn: Connection) -> list[dict[str, Any]]:
    """Cancelled bookings holding money with no credit issued."""
    found = []
    for booking in list_bookings_by_status(conn, [BookingStatus.CANCELLED.value]):
        financials = _financials(conn, booking)
        if financials.paid > 0 and count_credits(conn, booking.id) == 0:
            found.append(_anomaly(CANCELLED_WITHOUT_CREDIT, booking, financials))
    return found


def find_completed_without_checkout(conn: Connection) -> list[dict[str, Any]]:
    """Completed bookings with no actual check-out timestamp."""
    return [
        _anomaly(COMPLETED_WITHOUT_CHECKOUT, booking, _financials(conn, booking))
        for booking in list_bookings_by_status(conn, [BookingStatus.COMPLETED.value])
        if booking.actual_check_out is None
    ]


def suggest_reclassification(anomaly: dict[str, Any]) -> Optional[str]:
    """
    Default reclassification policy offered to the operator.

    Cancelled and fully paid:
        checked out            -> completed
        checked in             -> checked-in
        otherwise              -> paid (flagged overdue by the work lists once
                                  its check-out day has passed)
    Completed without check-out:
        fully paid             -> paid
        otherwise              -> confirmed
    Cancelled without credit: no status change; issue the missing credit.

    Args:
        anomaly: Dict from one of the find_* functions

    Returns:
        Suggested status value, or None when the status should stay
    """
    code = anomaly["anomaly"]
    financials: Financials = anomaly["financials"]

    if code == CANCELLED_FULLY_PAID:
        if anomaly["actual_check_out"] is not None:
            return BookingStatus.COMPLETED.value
        if anomaly["actual_check_in"] is not None:
            return BookingStatus.CHECKED_IN.value
        # Never report a completed stay without a real check-out
        return BookingStatus.PAID.value

    if code == COMPLETED_WITHOUT_CHECKOUT:
        if financials.is_fully_paid:
            return BookingStatus.PAID.value
        return BookingStatus.CONFIRMED.value

    return None


def reclassify(
    conn: Connection,
    booking_id: int,
    expected_status: str,
    new_status: str,
    actor: Optional[int],
    reason: str,
    now: datetime,
) -> None:
    """
    Administrative status write for legacy rows, bypassing transition guards.

    Still optimistic: the write only applies if the booking is in
    ``expected_status``.

    Raises:
        ValidationError: Unknown status or missing reason
        NotFoundError: Booking absent
        InvalidStateTransition: Booking no longer in ``expected_status``
    """
    try:
        target = BookingStatus(new_status)
        expected = BookingStatus(expected_status)
    except ValueError as e:
        raise ValidationError(f"Unknown booking status: {e}") from e
    if not reason or not reason.strip():
        raise ValidationError("A repair reason is required")

    booking = get_booking(conn, booking_id)
    if booking is None:
        raise NotFoundError("Booking", booking_id)

    note_column = "cancellation_notes" if expected is BookingStatus.CANCELLED else "checkout_notes"
    note = f"[repair {hotel_today(now).isoformat()}] {reason.strip()}"
    values = {note_column: f"{getattr(booking, note_column) or ''}\n{note}".strip()}

    if not update_booking_status(conn, booking_id, expected.value, target.value, values):
        raise InvalidStateTransition(booking.status, target.value, "Booking changed since detection")

    logger.warning(
        "legacy_booking_reclassified",
        booking_id=booking_id,
        from_status=expected.value,
        to_status=target.value,
        actor=actor,
        reason=reason,
    )


def issue_missing_credit(
    conn: Connection,
    booking_id: int,
    actor: Optional[int],
    now: datetime,
    validity_days: int = CREDIT_VALIDITY_DAYS,
) -> int:
    """
    Issue the credit a legacy paid cancellation never received.

    Returns:
        New credit ID

    Raises:
        NotFoundError: Booking absent
        InvalidStateTransition: Booking is not cancelled
        ConflictError: CREDIT_EXISTS or NOTHING_PAID
    """
    booking = get_booking(conn, booking_id)
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    if booking.status != BookingStatus.CANCELLED.value:
        raise InvalidStateTransition(booking.status, "issue_credit", "Only cancelled bookings get credits")
    if count_credits(conn, booking_id) > 0:
        raise ConflictError("CREDIT_EXISTS", f"Booking {booking_id} already has a credit")

    financials = _financials(conn, booking)
    if financials.paid <= 0:
        raise ConflictError("NOTHING_PAID", f"Booking {booking_id} has no accepted payments")

    credit_id = insert_credit(
        conn,
        {
            "booking_id": booking_id,
            "guest_id": booking.guest_id,
            "amount": financials.paid,
            "status": CreditStatus.ACTIVE.value,
            "valid_until": add_days(hotel_today(now), validity_days),
            "reason": f"Repair: credit for legacy cancellation of booking {booking_id}",
            "created_by": actor,
        },
    )
    logger.warning("legacy_credit_issued", booking_id=booking_id, credit_id=credit_id, amount=str(financials.paid))
    return credit_id
