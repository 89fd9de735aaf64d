"""
Interfaces to systems the booking engine informs or reads from.

Each protocol has a default implementation backed by this service's own tables;
deployments that keep rooms, passenger registration or laundry elsewhere pass
their own objects to ``BookingLifecycle``. All methods receive the caller's
connection so their writes join the transition's transaction.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import structlog
from sqlalchemy import update
from sqlalchemy.engine import Connection

from front_desk.db.readers.inventory import count_registered_passengers
from front_desk.db.writers.inventory import insert_laundry_batches
from front_desk.models.enums import RoomStatus
from front_desk.models.rooms import Room
from front_desk.schemas.inventory import DirtyItem

logger = structlog.get_logger(__name__)


class RoomAvailability(Protocol):
    def mark_occupied(self, conn: Connection, room_number: str) -> None: ...

    def mark_available(self, conn: Connection, room_number: str) -> None: ...


class PassengerRegistry(Protocol):
    def count_registered(self, conn: Connection, booking_id: int) -> int: ...


class LaundryQueue(Protocol):
    def enqueue_dirty(
        self,
        conn: Connection,
        room_number: str,
        booking_id: int,
        items: Sequence[DirtyItem],
    ) -> None: ...


class SqlRoomAvailability:
    """Writes occupancy to the rooms table."""

    def _set_status(self, conn: Connection, room_number: str, status: RoomStatus) -> None:
        result = conn.execute(
            update(Room).where(Room.room_number == room_number).values(status=status.value)
        )
        if result.rowcount == 0:
            logger.warning("room_status_not_updated", room_number=room_number, status=status.value)
        else:
            logger.debug("room_status_updated", room_number=room_number, status=status.value)

    def mark_occupied(self, conn: Connection, room_number: str) -> None:
        self._set_status(conn, room_number, RoomStatus.OCCUPIED)

    def mark_available(self, conn: Connection, room_number: str) -> None:
        self._set_status(conn, room_number, RoomStatus.AVAILABLE)


class SqlPassengerRegistry:
    """Counts rows in registered_passengers."""

    def count_registered(self, conn: Connection, booking_id: int) -> int:
        return count_registered_passengers(conn, booking_id)


class SqlLaundryQueue:
    """Appends dirty-item batches to laundry_batches."""

    def enqueue_dirty(
        self,
        conn: Connection,
        room_number: str,
        booking_id: int,
        items: Sequence[DirtyItem],
    ) -> None:
        insert_laundry_batches(
            conn,
            [
                {
                    "room_number": room_number,
                    "booking_id": booking_id,
                    "item_id": item.item_id,
                    "quantity": item.quantity,
                    "priority": item.priority,
                }
                for item in items
            ],
        )
        logger.info(
            "laundry_batch_queued",
            room_number=room_number,
            booking_id=booking_id,
            items=len(items),
        )
