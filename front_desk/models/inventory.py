# models/inventory.py

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, false
from sqlalchemy.sql import func

from front_desk.models.base import Base


class InventoryItem(Base):
    """
    ORM model for basic inventory item types (towels, sheets, toiletries).

    Reusable items go to laundry when returned from a room; consumables do not.
    """

    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False, server_default="bedding")
    is_reusable = Column(Boolean, nullable=False, server_default=false())


class RoomItem(Base):
    """Items configured for a room; check-in assigns one usage row per entry."""

    __tablename__ = "room_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_number = Column(
        String(10), ForeignKey("rooms.room_number", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False, server_default="1")


class InventoryUsage(Base):
    """
    ORM model for one item type assigned to a booking.

    Status graph: assigned -> {in_use, returned, consumed, damaged},
    in_use -> {returned, consumed, damaged}. Terminal rows are never reopened and
    quantity_consumed + quantity_returned never exceeds quantity_assigned.
    """

    __tablename__ = "inventory_usages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    quantity_assigned = Column(Integer, nullable=False)
    quantity_consumed = Column(Integer, nullable=False, server_default="0")
    quantity_returned = Column(Integer, nullable=False, server_default="0")
    status = Column(String(20), nullable=False, server_default="assigned")
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    returned_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class LaundryBatch(Base):
    """Dirty items handed to laundry, keyed by the room and booking they left."""

    __tablename__ = "laundry_batches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_number = Column(String(10), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    priority = Column(String(10), nullable=False, server_default="normal")
    status = Column(String(20), nullable=False, server_default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
