"""
Financial reconciliation for a single booking.

``reconcile`` is the one authoritative rule for computing what a booking owes.
It is a pure function over a snapshot (booking row, payment rows, extra charge
rows); nothing here touches the database, so it is safe to call repeatedly and
concurrently, including on cancelled or completed bookings.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from front_desk.models.enums import PaymentStatus
from front_desk.schemas.financials import Financials

ZERO = Decimal("0")
CENTS = Decimal("0.01")

ACCEPTED_PAYMENT_STATUSES = frozenset({PaymentStatus.AUTHORIZED.value, PaymentStatus.COMPLETED.value})


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _money(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return ZERO


def payment_counts(payment: Any) -> bool:
    """
    Whether a payment contributes to the paid total.

    Args:
        payment: Row, mapping or object with a ``status`` attribute

    Returns:
        True for authorized and completed payments only
    """
    status = _field(payment, "status")
    return getattr(status, "value", status) in ACCEPTED_PAYMENT_STATUSES


def charge_total(extra_charges: Iterable[Any]) -> Decimal:
    """Sum of amount x quantity over extra charges (missing quantity counts as 1)."""
    total = ZERO
    for charge in extra_charges:
        quantity = _field(charge, "quantity")
        total += _money(_field(charge, "amount")) * (1 if quantity is None else int(quantity))
    return total


def paid_total(payments: Iterable[Any]) -> Decimal:
    return sum((_money(_field(p, "amount")) for p in payments if payment_counts(p)), ZERO)


def reconcile(
    booking: Any,
    payments: Iterable[Any],
    extra_charges: Iterable[Any],
) -> Financials:
    """
    Compute payable, paid and pending amounts for a booking.

    payable = (room amount - discount, floored at 0) + sum(extra amount x quantity)
    paid    = sum(payment amount) for status in {authorized, completed}
    pending = max(payable - paid, 0)

    Args:
        booking: Booking row or mapping with ``total_amount`` and optional
            ``discount_amount``
        payments: Payment rows for the booking
        extra_charges: Extra charge rows for the booking

    Returns:
        Frozen Financials snapshot, quantized to cents

    Example:
        >>> reconcile(
        ...     {"total_amount": Decimal("150000")},
        ...     [{"amount": Decimal("170000"), "status": "completed"}],
        ...     [{"amount": Decimal("20000"), "quantity": 1}],
        ... ).is_fully_paid
        True
    """
    room_amount = _money(_field(booking, "total_amount"))
    discount = _money(_field(booking, "discount_amount"))

    payable = max(room_amount - discount, ZERO) + charge_total(extra_charges)
    paid = paid_total(payments)
    pending = max(payable - paid, ZERO)

    return Financials(
        payable=payable.quantize(CENTS),
        paid=paid.quantize(CENTS),
        pending=pending.quantize(CENTS),
        is_fully_paid=pending <= ZERO,
    )
