from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from front_desk.models.rooms import Room


def get_room(conn: Connection, room_number: str) -> Optional[Row]:
    """
    Fetch an active room.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        room_number (str): Room number.

    Returns:
        Optional[Row]: Room row, or None if missing or inactive.
    """
    stmt = select(Room).where(Room.room_number == room_number, Room.is_active.is_(True))
    return conn.execute(stmt).first()
