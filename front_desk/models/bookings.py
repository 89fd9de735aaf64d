# models/bookings.py

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    false,
)
from sqlalchemy.sql import func

from front_desk.models.base import Base

MONEY = Numeric(12, 2)


class Booking(Base):
    """
    ORM model for room reservations.

    Status moves through pending -> confirmed -> paid -> checked-in -> completed,
    with cancelled reachable from any non-terminal status. The four readiness
    flags gate check-in together with the financial reconciliation. Stay dates are
    hotel calendar days; ``nights`` is persisted and kept equal to
    check_out - check_in.
    """

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_number = Column(
        String(10), ForeignKey("rooms.room_number"), nullable=False, index=True
    )
    guest_id = Column(Integer, nullable=False, index=True)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    nights = Column(Integer, nullable=False)
    guest_count = Column(Integer, nullable=False, server_default="1")
    total_amount = Column(MONEY, nullable=False)
    discount_amount = Column(MONEY, nullable=False, server_default="0")
    discount_reason = Column(Text, nullable=True)
    discount_applied_by = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, server_default="pending", index=True)

    # Readiness flags
    room_clean = Column(Boolean, nullable=False, server_default=false())
    inventory_verified = Column(Boolean, nullable=False, server_default=false())
    inventory_verified_at = Column(DateTime(timezone=True), nullable=True)
    inventory_delivered = Column(Boolean, nullable=False, server_default=false())
    inventory_delivered_at = Column(DateTime(timezone=True), nullable=True)
    inventory_delivered_by = Column(Integer, nullable=True)
    passengers_completed = Column(Boolean, nullable=False, server_default=false())
    passengers_completed_at = Column(DateTime(timezone=True), nullable=True)

    actual_check_in = Column(DateTime(timezone=True), nullable=True)
    actual_check_out = Column(DateTime(timezone=True), nullable=True)
    checkout_notes = Column(Text, nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(Integer, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_notes = Column(Text, nullable=True)

    created_by = Column(Integer, nullable=True)
    is_archived = Column(Boolean, nullable=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Payment(Base):
    """
    ORM model for payments reported against a booking.

    Only authorized and completed payments count toward the paid total. The shift
    reference is set when the payment was accepted while the processing operator
    had an open cash drawer.
    """

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(MONEY, nullable=False)
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, server_default="completed")
    payment_type = Column(String(20), nullable=False, server_default="partial")
    processed_by = Column(Integer, nullable=True)
    shift_id = Column(Integer, ForeignKey("shifts.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ExtraCharge(Base):
    """ORM model for consumption and service charges added during a stay."""

    __tablename__ = "extra_charges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description = Column(String(255), nullable=False)
    amount = Column(MONEY, nullable=False)
    quantity = Column(Integer, nullable=False, server_default="1")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class BookingCredit(Base):
    """
    ORM model for credits issued when a booking is cancelled with money collected.

    The amount equals the paid total at cancellation time so collected funds stay
    visible and redeemable until ``valid_until``.
    """

    __tablename__ = "booking_credits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guest_id = Column(Integer, nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    status = Column(String(20), nullable=False, server_default="active")
    valid_until = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
