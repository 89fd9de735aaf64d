import logging
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from front_desk.models.enums import ShiftStatus
from front_desk.models.shifts import Shift

logger = logging.getLogger(__name__)


def insert_shift(conn: Connection, values: dict[str, Any]) -> int:
    """
    Insert an open shift.

    Raises sqlalchemy IntegrityError when the operator already holds an open
    shift (partial unique index uq_shifts_one_open_per_operator).

    Args:
        conn (Connection): SQLAlchemy DB connection.
        values (dict[str, Any]): Column values.

    Returns:
        int: New shift ID.
    """
    result = conn.execute(insert(Shift).values(**values))
    return int(result.inserted_primary_key[0])


def increment_open_shift(conn: Connection, shift_id: int, deltas: dict[str, Any]) -> bool:
    """
    Atomically add to running totals of an open shift.

    Increments are computed in SQL (col = col + delta) so concurrent payments
    never overwrite each other.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        shift_id (int): Shift ID.
        deltas (dict[str, Any]): Column name -> amount to add.

    Returns:
        bool: True if an open shift was updated.
    """
    values = {name: getattr(Shift, name) + delta for name, delta in deltas.items()}
    stmt = (
        update(Shift)
        .where(Shift.id == shift_id, Shift.status == ShiftStatus.OPEN.value)
        .values(**values)
    )
    return conn.execute(stmt).rowcount == 1


def close_shift_row(conn: Connection, shift_id: int, values: dict[str, Any]) -> bool:
    """
    Write closing fields, only if the shift is still open.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        shift_id (int): Shift ID.
        values (dict[str, Any]): closed_at, closing_cash, expected_cash, ...

    Returns:
        bool: True if the shift was closed by this call.
    """
    stmt = (
        update(Shift)
        .where(Shift.id == shift_id, Shift.status == ShiftStatus.OPEN.value)
        .values(status=ShiftStatus.CLOSED.value, **values)
    )
    closed = conn.execute(stmt).rowcount == 1
    if closed:
        logger.info(f"Closed shift {shift_id}")
    return closed
