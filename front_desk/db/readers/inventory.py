from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Row

from front_desk.models.inventory import InventoryItem, InventoryUsage, RoomItem
from front_desk.models.rooms import RegisteredPassenger


def get_usage(conn: Connection, usage_id: int) -> Optional[Row]:
    return conn.execute(select(InventoryUsage).where(InventoryUsage.id == usage_id)).first()


def list_usages(conn: Connection, booking_id: int) -> list[Row]:
    """
    Fetch usage rows for a booking joined with item name and reusability.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.

    Returns:
        list[Row]: InventoryUsage columns plus item_name, item_category, is_reusable.
    """
    stmt = (
        select(
            InventoryUsage,
            InventoryItem.name.label("item_name"),
            InventoryItem.category.label("item_category"),
            InventoryItem.is_reusable,
        )
        .join(InventoryItem, InventoryItem.id == InventoryUsage.item_id)
        .where(InventoryUsage.booking_id == booking_id)
        .order_by(InventoryUsage.id)
    )
    return list(conn.execute(stmt))


def get_room_items(conn: Connection, room_number: str) -> list[Row]:
    """
    Fetch the items configured for a room.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        room_number (str): Room number.

    Returns:
        list[Row]: item_id, quantity, item_name, item_category, is_reusable.
    """
    stmt = (
        select(
            RoomItem.item_id,
            RoomItem.quantity,
            InventoryItem.name.label("item_name"),
            InventoryItem.category.label("item_category"),
            InventoryItem.is_reusable,
        )
        .join(InventoryItem, InventoryItem.id == RoomItem.item_id)
        .where(RoomItem.room_number == room_number, RoomItem.quantity > 0)
        .order_by(RoomItem.id)
    )
    return list(conn.execute(stmt))


def count_registered_passengers(conn: Connection, booking_id: int) -> int:
    stmt = (
        select(func.count())
        .select_from(RegisteredPassenger)
        .where(RegisteredPassenger.booking_id == booking_id)
    )
    return int(conn.execute(stmt).scalar_one())
