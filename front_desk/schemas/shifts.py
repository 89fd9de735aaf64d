from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ShiftSnapshot(BaseModel):
    """Full shift state returned by open and close, including computed cash fields."""

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    id: int
    operator_id: int
    status: str
    opened_at: datetime
    closed_at: Optional[datetime] = None
    opening_cash: Decimal
    closing_cash: Optional[Decimal] = None
    expected_cash: Optional[Decimal] = None
    cash_difference: Optional[Decimal] = None
    total_cash_sales: Decimal
    total_card_sales: Decimal
    total_transfer_sales: Decimal
    total_sales: Decimal
    total_cash_count: int
    total_card_count: int
    total_transfer_count: int
    total_transactions: int
    check_ins_count: int
    check_outs_count: int
    bookings_created_count: int
    opening_notes: Optional[str] = None
    closing_notes: Optional[str] = None
