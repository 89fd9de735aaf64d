"""
Unit tests for booking financial reconciliation.
"""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from front_desk.models.enums import PaymentStatus
from front_desk.services.reconciliation import charge_total, paid_total, payment_counts, reconcile

BOOKING = {"total_amount": Decimal("150000")}
MINIBAR = [{"amount": Decimal("20000"), "quantity": 1}]


@pytest.mark.unit
def test_reconcile_booking_paid_in_full_with_extras() -> None:
    """Test room 150000 + extras 20000 with one completed payment of 170000."""
    financials = reconcile(
        BOOKING, [{"amount": Decimal("170000"), "status": "completed"}], MINIBAR
    )

    assert financials.payable == Decimal("170000")
    assert financials.paid == Decimal("170000")
    assert financials.pending == Decimal("0")
    assert financials.is_fully_paid is True


@pytest.mark.unit
def test_reconcile_ignores_gateway_pending_payment() -> None:
    """Test that a payment still pending at the gateway does not count as paid."""
    financials = reconcile(BOOKING, [{"amount": Decimal("170000"), "status": "pending"}], MINIBAR)

    assert financials.paid == Decimal("0")
    assert financials.pending == Decimal("170000")
    assert financials.is_fully_paid is False


@pytest.mark.unit
@pytest.mark.parametrize("status", ["pending", "failed"])
def test_non_accepted_payments_never_change_fully_paid(status: str) -> None:
    """Test that adding pending or failed payments leaves the outcome unchanged."""
    payments = [{"amount": Decimal("100000"), "status": "completed"}]
    before = reconcile(BOOKING, payments, [])
    after = reconcile(BOOKING, payments + [{"amount": Decimal("50000"), "status": status}], [])

    assert after == before
    assert after.is_fully_paid is False


@pytest.mark.unit
def test_authorized_payments_count_as_paid() -> None:
    """Test that authorized card holds count towards the paid total."""
    financials = reconcile(
        BOOKING,
        [
            {"amount": Decimal("100000"), "status": "authorized"},
            {"amount": Decimal("50000"), "status": "completed"},
        ],
        [],
    )

    assert financials.paid == Decimal("150000")
    assert financials.is_fully_paid is True


@pytest.mark.unit
def test_overpayment_never_yields_negative_pending() -> None:
    """Test that pending is floored at zero when paid exceeds payable."""
    financials = reconcile(BOOKING, [{"amount": Decimal("200000"), "status": "completed"}], [])

    assert financials.pending == Decimal("0")
    assert financials.paid == Decimal("200000")
    assert financials.is_fully_paid is True


@pytest.mark.unit
def test_discount_reduces_room_amount() -> None:
    """Test that the discount is taken off the room amount only."""
    booking = {"total_amount": Decimal("150000"), "discount_amount": Decimal("50000")}

    financials = reconcile(booking, [], MINIBAR)

    assert financials.payable == Decimal("120000")


@pytest.mark.unit
def test_discount_larger_than_room_amount_floors_at_zero() -> None:
    """Test that an oversized discount never makes extras cheaper."""
    booking = {"total_amount": Decimal("100000"), "discount_amount": Decimal("150000")}

    financials = reconcile(booking, [], MINIBAR)

    assert financials.payable == Decimal("20000")


@pytest.mark.unit
def test_reconcile_is_idempotent() -> None:
    """Test that repeated calls on the same snapshot serialize identically."""
    payments = [{"amount": Decimal("80000"), "status": "completed"}]

    first = reconcile(BOOKING, payments, MINIBAR)
    second = reconcile(BOOKING, payments, MINIBAR)

    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.unit
def test_reconcile_accepts_row_like_objects() -> None:
    """Test that attribute-style rows and enum statuses work like mappings."""
    booking = SimpleNamespace(total_amount=Decimal("90000"), discount_amount=None)
    payment = SimpleNamespace(amount=Decimal("90000"), status=PaymentStatus.COMPLETED)

    financials = reconcile(booking, [payment], [])

    assert financials.is_fully_paid is True


@pytest.mark.unit
def test_charge_total_multiplies_by_quantity_and_defaults_to_one() -> None:
    """Test extra charge totals with explicit and missing quantities."""
    charges = [
        {"amount": Decimal("5000"), "quantity": 3},
        {"amount": Decimal("2000"), "quantity": None},
    ]

    assert charge_total(charges) == Decimal("17000")


@pytest.mark.unit
def test_missing_amounts_are_treated_as_zero() -> None:
    """Test that null amounts do not break reconciliation."""
    assert paid_total([{"amount": None, "status": "completed"}]) == Decimal("0")
    assert reconcile({"total_amount": None}, [], []).payable == Decimal("0")


@pytest.mark.unit
@pytest.mark.parametrize(
    "status, counts",
    [("authorized", True), ("completed", True), ("pending", False), ("failed", False)],
)
def test_payment_counts(status: str, counts: bool) -> None:
    """Test which payment statuses contribute to the paid total."""
    assert payment_counts({"status": status}) is counts


@pytest.mark.unit
def test_financials_serialize_with_camel_case_aliases() -> None:
    """Test the wire shape of a financial snapshot."""
    dumped = reconcile(BOOKING, [], []).model_dump(by_alias=True)

    assert set(dumped) == {"payable", "paid", "pending", "isFullyPaid"}
