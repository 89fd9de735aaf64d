"""
Unit tests for the error taxonomy and the lifecycle result object.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from front_desk.errors import (
    ConflictError,
    FrontDeskError,
    InvalidStateTransition,
    NotFoundError,
    PreconditionsNotMet,
    ValidationError,
)
from front_desk.schemas.financials import Financials
from front_desk.schemas.results import TransitionResult


@pytest.mark.unit
def test_invalid_state_transition_names_both_statuses() -> None:
    """Test the default message and details of InvalidStateTransition."""
    error = InvalidStateTransition("completed", "checked-in")

    assert error.kind == "InvalidStateTransition"
    assert error.message == "Cannot move from 'completed' to 'checked-in'"
    assert error.to_dict() == {
        "kind": "InvalidStateTransition",
        "message": "Cannot move from 'completed' to 'checked-in'",
        "current": "completed",
        "attempted": "checked-in",
    }


@pytest.mark.unit
def test_preconditions_not_met_lists_steps() -> None:
    """Test that the message names every pending step."""
    error = PreconditionsNotMet(["register passengers", "deliver inventory"])

    assert error.pending_steps == ["register passengers", "deliver inventory"]
    assert "register passengers" in error.message
    assert "deliver inventory" in error.message
    assert error.to_dict()["pending_steps"] == ["register passengers", "deliver inventory"]


@pytest.mark.unit
def test_conflict_and_not_found_details() -> None:
    """Test codes and identifiers carried by conflict and lookup errors."""
    conflict = ConflictError("OPEN_SHIFT_EXISTS", "Operator 3 already has open shift 9")
    missing = NotFoundError("Booking", 42)

    assert conflict.code == "OPEN_SHIFT_EXISTS"
    assert conflict.to_dict()["code"] == "OPEN_SHIFT_EXISTS"
    assert missing.message == "Booking 42 not found"
    assert missing.to_dict()["id"] == 42


@pytest.mark.unit
def test_all_errors_share_the_base_class() -> None:
    """Test that callers can catch every domain error at once."""
    for error in (
        ValidationError("bad"),
        InvalidStateTransition("paid", "completed"),
        PreconditionsNotMet(["clean room"]),
        ConflictError("X"),
        NotFoundError("Shift", 1),
    ):
        assert isinstance(error, FrontDeskError)


@pytest.mark.unit
def test_failed_result_carries_steps_and_reraises() -> None:
    """Test TransitionResult.failure and raise_for_error."""
    financials = Financials(
        payable=Decimal("150000"), paid=Decimal("0"), pending=Decimal("150000"), is_fully_paid=False
    )
    error = PreconditionsNotMet(["complete payment"])

    result = TransitionResult.failure(error, status="confirmed", booking_id=7, financials=financials)

    assert result.success is False
    assert result.status == "confirmed"
    assert result.pending_steps == ["complete payment"]
    assert result.error is not None and result.error.kind == "PreconditionsNotMet"
    assert result.exception is error
    with pytest.raises(PreconditionsNotMet):
        result.raise_for_error()


@pytest.mark.unit
def test_successful_result_does_not_raise() -> None:
    """Test that raise_for_error is a no-op on success."""
    result = TransitionResult(success=True, status="paid", booking_id=7)

    result.raise_for_error()
    assert result.exception is None


@pytest.mark.unit
def test_result_serializes_with_camel_case_aliases() -> None:
    """Test the wire shape of a result."""
    dumped = TransitionResult.failure(ValidationError("bad"), booking_id=1).model_dump(by_alias=True)

    assert "bookingId" in dumped
    assert "pendingSteps" in dumped
    assert dumped["error"] == {"kind": "ValidationError", "message": "bad"}
