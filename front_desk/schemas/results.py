"""
Structured result returned by every booking lifecycle operation.

Callers get ``success`` plus the resulting status, and on failure the error kind
and the exact pending steps that blocked the transition.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from front_desk.errors import FrontDeskError
from front_desk.schemas.financials import Financials


class ErrorInfo(BaseModel):
    kind: str
    message: str


class CreditInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    amount: Decimal
    valid_until: date


class TransitionResult(BaseModel):
    """
    Outcome of a booking lifecycle operation.

    Attributes:
        success: Whether the operation committed
        status: Booking status after the operation (unchanged on failure)
        booking_id: Booking the operation targeted
        pending_steps: Unmet readiness steps, when relevant
        financials: Reconciliation snapshot, when computed
        error: Error kind and message on failure
        credit: Credit issued by a paid cancellation
        data: Operation-specific payload (created ids, list rows)

    Example:
        >>> result = lifecycle.check_in(booking_id=7, operator_id=3, now=utc_now())
        >>> if not result.success:
        ...     print(result.pending_steps)
        ['register passengers', 'deliver inventory']
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    status: Optional[str] = None
    booking_id: Optional[int] = None
    pending_steps: list[str] = Field(default_factory=list)
    financials: Optional[Financials] = None
    error: Optional[ErrorInfo] = None
    credit: Optional[CreditInfo] = None
    data: dict[str, Any] = Field(default_factory=dict)

    _exception: Optional[FrontDeskError] = PrivateAttr(default=None)

    @classmethod
    def failure(
        cls,
        exc: FrontDeskError,
        *,
        status: Optional[str] = None,
        booking_id: Optional[int] = None,
        financials: Optional[Financials] = None,
    ) -> "TransitionResult":
        """Build a failed result that remembers the error for ``raise_for_error``."""
        result = cls(
            success=False,
            status=status,
            booking_id=booking_id,
            pending_steps=list(getattr(exc, "pending_steps", [])),
            financials=financials,
            error=ErrorInfo(kind=exc.kind, message=exc.message),
        )
        result._exception = exc
        return result

    @property
    def exception(self) -> Optional[FrontDeskError]:
        return self._exception

    def raise_for_error(self) -> None:
        """Re-raise the stored domain error if the operation failed."""
        if self._exception is not None:
            raise self._exception
