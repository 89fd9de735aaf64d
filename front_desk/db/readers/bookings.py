from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Row

from front_desk.models.bookings import Booking, BookingCredit, ExtraCharge, Payment


def get_booking(conn: Connection, booking_id: int, for_update: bool = False) -> Optional[Row]:
    """
    Fetch a booking row.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.
        for_update (bool): Lock the row until the transaction ends (ignored by SQLite).

    Returns:
        Optional[Row]: Booking row or None if not found.
    """
    stmt = select(Booking).where(Booking.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    return conn.execute(stmt).first()


def get_payments(conn: Connection, booking_id: int) -> list[Row]:
    """
    Fetch every payment recorded against a booking, oldest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.

    Returns:
        list[Row]: Payment rows regardless of status.
    """
    stmt = select(Payment).where(Payment.booking_id == booking_id).order_by(Payment.id)
    return list(conn.execute(stmt))


def get_payment(conn: Connection, payment_id: int) -> Optional[Row]:
    return conn.execute(select(Payment).where(Payment.id == payment_id)).first()


def get_extra_charges(conn: Connection, booking_id: int) -> list[Row]:
    stmt = select(ExtraCharge).where(ExtraCharge.booking_id == booking_id).order_by(ExtraCharge.id)
    return list(conn.execute(stmt))


def list_bookings_by_status(conn: Connection, statuses: Iterable[str]) -> list[Row]:
    """
    Fetch non-archived bookings in any of the given statuses, by check-in date.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        statuses (Iterable[str]): Status values to include.

    Returns:
        list[Row]: Booking rows.
    """
    stmt = (
        select(Booking)
        .where(Booking.status.in_(list(statuses)), Booking.is_archived.is_(False))
        .order_by(Booking.check_in, Booking.id)
    )
    return list(conn.execute(stmt))


def get_credits(conn: Connection, booking_id: int) -> list[Row]:
    stmt = select(BookingCredit).where(BookingCredit.booking_id == booking_id)
    return list(conn.execute(stmt))


def count_credits(conn: Connection, booking_id: int) -> int:
    stmt = select(func.count()).select_from(BookingCredit).where(
        BookingCredit.booking_id == booking_id
    )
    return int(conn.execute(stmt).scalar_one())


def booking_snapshot(conn: Connection, booking_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a booking with its payments and extra charges in one call.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (int): Booking ID.

    Returns:
        Optional[dict[str, Any]]: {"booking", "payments", "extra_charges"} or None.
    """
    booking = get_booking(conn, booking_id)
    if booking is None:
        return None
    return {
        "booking": booking,
        "payments": get_payments(conn, booking_id),
        "extra_charges": get_extra_charges(conn, booking_id),
    }
