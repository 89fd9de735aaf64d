# models/rooms.py

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, false, true
from sqlalchemy.sql import func

from front_desk.models.base import Base


class Room(Base):
    """
    ORM model for hotel rooms.

    Only the occupancy status is managed here; pricing and room types belong to
    other systems. Check-in marks a room occupied, check-out and cancellation
    mark it available again.
    """

    __tablename__ = "rooms"

    room_number = Column(String(10), primary_key=True)
    status = Column(String(20), nullable=False, server_default="available")
    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class RegisteredPassenger(Base):
    """
    ORM model for passengers registered against a booking.

    Feeds the passengers-completed readiness flag: a booking is complete when
    the number of registered passengers reaches its guest count.
    """

    __tablename__ = "registered_passengers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    full_name = Column(String(200), nullable=False)
    document_number = Column(String(50), nullable=True)
    is_minor = Column(Boolean, nullable=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
