"""
Typed financial snapshot of a booking.

Produced only by ``front_desk.services.reconciliation.reconcile`` and consumed
everywhere a balance is needed.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Financials(BaseModel):
    """
    Payable vs. paid determination for one booking.

    Attributes:
        payable: Room amount minus discount plus extra charges
        paid: Sum of authorized and completed payments
        pending: max(payable - paid, 0)
        is_fully_paid: True when nothing is pending

    Example:
        >>> Financials(payable=Decimal("170000"), paid=Decimal("170000"),
        ...            pending=Decimal("0"), is_fully_paid=True).model_dump(by_alias=True)
        {'payable': Decimal('170000'), 'paid': Decimal('170000'), 'pending': Decimal('0'), 'isFullyPaid': True}
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    payable: Decimal
    paid: Decimal
    pending: Decimal
    is_fully_paid: bool
