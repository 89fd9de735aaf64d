import logging
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from front_desk.models.bookings import Booking, BookingCredit, ExtraCharge, Payment

logger = logging.getLogger(__name__)


def insert_booking(conn: Connection, values: dict[str, Any]) -> int:
    """
    Insert a booking row.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        values (dict[str, Any]): Column values.

    Returns:
        int: New booking ID.
    """
    result = conn.execute(insert(Booking).values(**values))
    booking_id = int(result.inserted_primary_key[0])
    logger.debug(f"Inserted booking {booking_id}")
    return booking_id


def update_booking(conn: Connection, booking_id: int, values: dict[str, Any]) -> None:
    """
    Update non-status booking fields (readiness flags, discount, dates).

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.
        values (dict[str, Any]): Fields to update.
    """
    conn.execute(update(Booking).where(Booking.id == booking_id).values(**values))


def update_booking_status(
    conn: Connection,
    booking_id: int,
    expected_status: str,
    new_status: str,
    values: dict[str, Any] | None = None,
) -> bool:
    """
    Move a booking to a new status only if it is still in the expected one.

    The WHERE clause on the current status makes concurrent transitions on the
    same booking linear: the second writer matches zero rows.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.
        expected_status (str): Status read earlier in the same transaction.
        new_status (str): Target status.
        values (dict[str, Any] | None): Extra fields written with the status.

    Returns:
        bool: True if the row was updated, False if the status had changed.
    """
    stmt = (
        update(Booking)
        .where(Booking.id == booking_id, Booking.status == expected_status)
        .values(status=new_status, **(values or {}))
    )
    updated = conn.execute(stmt).rowcount == 1
    if not updated:
        logger.warning(
            f"Booking {booking_id} status update {expected_status} -> {new_status} matched no row"
        )
    return updated


def insert_payment(conn: Connection, values: dict[str, Any]) -> int:
    result = conn.execute(insert(Payment).values(**values))
    return int(result.inserted_primary_key[0])


def update_payment(conn: Connection, payment_id: int, values: dict[str, Any]) -> None:
    conn.execute(update(Payment).where(Payment.id == payment_id).values(**values))


def insert_extra_charge(conn: Connection, values: dict[str, Any]) -> int:
    result = conn.execute(insert(ExtraCharge).values(**values))
    return int(result.inserted_primary_key[0])


def insert_credit(conn: Connection, values: dict[str, Any]) -> int:
    """
    Insert a booking credit.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        values (dict[str, Any]): Column values (booking_id, guest_id, amount, valid_until...).

    Returns:
        int: New credit ID.
    """
    result = conn.execute(insert(BookingCredit).values(**values))
    credit_id = int(result.inserted_primary_key[0])
    logger.info(f"Issued credit {credit_id} for booking {values.get('booking_id')}")
    return credit_id
