from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Row

from front_desk.models.enums import ShiftStatus
from front_desk.models.shifts import Shift


def get_shift(conn: Connection, shift_id: int) -> Optional[Row]:
    return conn.execute(select(Shift).where(Shift.id == shift_id)).first()


def get_open_shift(conn: Connection, operator_id: int) -> Optional[Row]:
    """
    Fetch the operator's open shift, if any.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        operator_id (int): Operator (user) ID.

    Returns:
        Optional[Row]: The most recently opened open shift, or None.
    """
    stmt = (
        select(Shift)
        .where(Shift.operator_id == operator_id, Shift.status == ShiftStatus.OPEN.value)
        .order_by(Shift.opened_at.desc(), Shift.id.desc())
    )
    return conn.execute(stmt).first()


def list_open_shifts(conn: Connection, operator_id: int) -> list[Row]:
    """Open shifts for an operator, most recently opened first."""
    stmt = (
        select(Shift)
        .where(Shift.operator_id == operator_id, Shift.status == ShiftStatus.OPEN.value)
        .order_by(Shift.opened_at.desc(), Shift.id.desc())
    )
    return list(conn.execute(stmt))


def operators_with_duplicate_open_shifts(conn: Connection) -> list[int]:
    """
    Find operators holding more than one open shift.

    Args:
        conn (Connection): SQLAlchemy DB connection.

    Returns:
        list[int]: Operator IDs, ascending.
    """
    stmt = (
        select(Shift.operator_id)
        .where(Shift.status == ShiftStatus.OPEN.value)
        .group_by(Shift.operator_id)
        .having(func.count(Shift.id) > 1)
        .order_by(Shift.operator_id)
    )
    return [row.operator_id for row in conn.execute(stmt)]
