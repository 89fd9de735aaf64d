"""
Shift ledger: an operator's cash-drawer session.

At most one shift per operator may be open. The rule is enforced by the
partial unique index on shifts(operator_id) WHERE status = 'open'; the lookup
before the insert only produces a friendlier error for the common case, while
the index turns a concurrent duplicate open into ConflictError.

Functions take the caller's Connection; the caller owns the transaction.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import IntegrityError

from front_desk.db.readers.shifts import get_open_shift, get_shift, list_open_shifts
from front_desk.db.writers.shifts import close_shift_row, increment_open_shift, insert_shift
from front_desk.errors import ConflictError, InvalidStateTransition, NotFoundError, ValidationError
from front_desk.metrics import shift_cash_difference, shift_events
from front_desk.models.enums import PaymentMethod, ShiftStatus
from front_desk.schemas.shifts import ShiftSnapshot

logger = structlog.get_logger(__name__)

OPEN_SHIFT_EXISTS = "OPEN_SHIFT_EXISTS"
SHIFT_CLOSED = "SHIFT_CLOSED"

_METHOD_COLUMNS = {
    PaymentMethod.CASH: ("total_cash_sales", "total_cash_count"),
    PaymentMethod.CARD: ("total_card_sales", "total_card_count"),
    PaymentMethod.TRANSFER: ("total_transfer_sales", "total_transfer_count"),
}


def _as_decimal(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be a number", **{field: value}) from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number", **{field: str(value)})
    return amount


def _require_shift(conn: Connection, shift_id: int) -> Row:
    shift = get_shift(conn, shift_id)
    if shift is None:
        raise NotFoundError("Shift", shift_id)
    return shift


def snapshot(conn: Connection, shift_id: int) -> ShiftSnapshot:
    return ShiftSnapshot.model_validate(_require_shift(conn, shift_id))


def open_shift(
    conn: Connection,
    operator_id: int,
    opening_cash: Any,
    now: datetime,
    notes: Optional[str] = None,
) -> ShiftSnapshot:
    """
    Open a cash drawer for an operator.

    Args:
        conn: Active connection
        operator_id: Operator opening the drawer
        opening_cash: Counted cash at open, must be >= 0
        now: Opening instant
        notes: Opening notes

    Returns:
        Snapshot of the new shift

    Raises:
        ValidationError: Negative or non-numeric opening cash
        ConflictError: OPEN_SHIFT_EXISTS when the operator already has an open shift

    Example:
        >>> with engine.begin() as conn:
        ...     shift = open_shift(conn, operator_id=3, opening_cash=50000, now=utc_now())
        >>> shift.status
        'open'
    """
    amount = _as_decimal(opening_cash, "opening_cash")
    if amount < 0:
        raise ValidationError("Opening cash cannot be negative", opening_cash=str(amount))

    existing = get_open_shift(conn, operator_id)
    if existing is not None:
        shift_events.labels(event="open_rejected").inc()
        logger.warning("shift_open_rejected", operator_id=operator_id, open_shift_id=existing.id)
        raise ConflictError(
            OPEN_SHIFT_EXISTS, f"Operator {operator_id} already has open shift {existing.id}"
        )

    try:
        shift_id = insert_shift(
            conn,
            {
                "operator_id": operator_id,
                "status": ShiftStatus.OPEN.value,
                "opened_at": now,
                "opening_cash": amount,
                "opening_notes": notes,
            },
        )
    except IntegrityError as e:
        shift_events.labels(event="open_rejected").inc()
        logger.warning("shift_open_conflict", operator_id=operator_id)
        raise ConflictError(
            OPEN_SHIFT_EXISTS, f"Operator {operator_id} already has an open shift"
        ) from e

    shift_events.labels(event="opened").inc()
    logger.info("shift_opened", shift_id=shift_id, operator_id=operator_id, opening_cash=str(amount))
    return snapshot(conn, shift_id)


def _increment(conn: Connection, shift_id: int, deltas: dict[str, Any]) -> None:
    if increment_open_shift(conn, shift_id, deltas):
        return
    shift = _require_shift(conn, shift_id)
    raise ConflictError(SHIFT_CLOSED, f"Shift {shift_id} is {shift.status}")


def record_payment(conn: Connection, shift_id: int, method: str, amount: Any) -> None:
    """
    Add an accepted payment to the shift totals.

    Must be called exactly once per payment attributed to the shift, when the
    payment is accepted.

    Args:
        conn: Active connection
        shift_id: Open shift the payment belongs to
        method: cash, card or transfer
        amount: Payment amount

    Raises:
        ValidationError: Unknown method or non-positive amount
        NotFoundError: Shift absent
        ConflictError: SHIFT_CLOSED when the shift is no longer open
    """
    try:
        sales_column, count_column = _METHOD_COLUMNS[PaymentMethod(method)]
    except ValueError as e:
        raise ValidationError(f"Unknown payment method: {method!r}") from e

    value = _as_decimal(amount, "amount")
    if value <= 0:
        raise ValidationError("Payment amount must be greater than zero", amount=str(value))

    _increment(
        conn,
        shift_id,
        {
            sales_column: value,
            count_column: 1,
            "total_sales": value,
            "total_transactions": 1,
        },
    )
    logger.debug("shift_payment_recorded", shift_id=shift_id, method=method, amount=str(value))


def reverse_payment(conn: Connection, shift_id: int, method: str, amount: Any) -> bool:
    """
    Take a payment that stopped counting back out of its shift totals.

    Closed shifts are left untouched; their variance was already settled.

    Args:
        conn: Active connection
        shift_id: Shift the payment was attributed to
        method: Payment method
        amount: Payment amount

    Returns:
        True if an open shift was adjusted
    """
    sales_column, count_column = _METHOD_COLUMNS[PaymentMethod(method)]
    value = _as_decimal(amount, "amount")
    adjusted = increment_open_shift(
        conn,
        shift_id,
        {
            sales_column: -value,
            count_column: -1,
            "total_sales": -value,
            "total_transactions": -1,
        },
    )
    if adjusted:
        logger.info("shift_payment_reversed", shift_id=shift_id, method=method, amount=str(value))
    else:
        logger.warning("shift_payment_not_reversed", shift_id=shift_id, reason="shift_not_open")
    return adjusted


def record_check_in(conn: Connection, shift_id: int) -> None:
    _increment(conn, shift_id, {"check_ins_count": 1})


def record_check_out(conn: Connection, shift_id: int) -> None:
    _increment(conn, shift_id, {"check_outs_count": 1})


def record_booking_created(conn: Connection, shift_id: int) -> None:
    _increment(conn, shift_id, {"bookings_created_count": 1})


def _close(
    conn: Connection,
    shift: Row,
    closing_cash: Decimal,
    now: datetime,
    notes: Optional[str],
) -> Decimal:
    expected = Decimal(shift.opening_cash) + Decimal(shift.total_cash_sales)
    difference = closing_cash - expected
    closed = close_shift_row(
        conn,
        shift.id,
        {
            "closed_at": now,
            "closing_cash": closing_cash,
            "expected_cash": expected,
            "cash_difference": difference,
            "closing_notes": notes,
        },
    )
    if not closed:
        raise InvalidStateTransition(ShiftStatus.CLOSED.value, ShiftStatus.CLOSED.value)
    return difference


def close_shift(
    conn: Connection,
    shift_id: int,
    closing_cash: Any,
    now: datetime,
    notes: Optional[str] = None,
) -> ShiftSnapshot:
    """
    Close a shift and compute its cash variance.

    expected_cash = opening_cash + total_cash_sales
    cash_difference = closing_cash - expected_cash

    Args:
        conn: Active connection
        shift_id: Shift to close
        closing_cash: Counted cash at close, must be >= 0
        now: Closing instant
        notes: Closing notes

    Returns:
        Snapshot including expected_cash and cash_difference

    Raises:
        ValidationError: Negative or non-numeric closing cash
        NotFoundError: Shift absent
        InvalidStateTransition: Shift already closed
    """
    amount = _as_decimal(closing_cash, "closing_cash")
    if amount < 0:
        raise ValidationError("Closing cash cannot be negative", closing_cash=str(amount))

    shift = _require_shift(conn, shift_id)
    if shift.status != ShiftStatus.OPEN.value:
        raise InvalidStateTransition(shift.status, ShiftStatus.CLOSED.value, "Shift is already closed")

    difference = _close(conn, shift, amount, now, notes)

    shift_events.labels(event="closed").inc()
    shift_cash_difference.observe(float(difference))
    logger.info(
        "shift_closed",
        shift_id=shift_id,
        operator_id=shift.operator_id,
        cash_difference=str(difference),
    )
    return snapshot(conn, shift_id)


def reconcile_duplicates(conn: Connection, operator_id: int, now: datetime) -> list[int]:
    """
    Force-close all but the most recently opened open shift of an operator.

    Repair routine for data written before the uniqueness index existed. The
    force-closed shifts were never counted, so their closing cash is recorded as
    the expected cash (difference 0) and the note names the surviving shift.

    Args:
        conn: Active connection
        operator_id: Operator to repair
        now: Closing instant for the force-closed shifts

    Returns:
        IDs of the shifts that were closed (empty when nothing to repair)
    """
    open_shifts = list_open_shifts(conn, operator_id)
    if len(open_shifts) <= 1:
        return []

    survivor, duplicates = open_shifts[0], open_shifts[1:]
    closed_ids: list[int] = []
    for shift in duplicates:
        expected = Decimal(shift.opening_cash) + Decimal(shift.total_cash_sales)
        note = (
            f"Force-closed: duplicate open shift for operator {operator_id}; "
            f"kept shift {survivor.id}. Cash not counted."
        )
        _close(conn, shift, expected, now, note)
        shift_events.labels(event="force_closed").inc()
        closed_ids.append(shift.id)

    logger.warning(
        "duplicate_shifts_closed",
        operator_id=operator_id,
        kept_shift_id=survivor.id,
        closed_shift_ids=closed_ids,
    )
    return closed_ids
