import logging
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from front_desk.models.inventory import InventoryUsage, LaundryBatch

logger = logging.getLogger(__name__)


def insert_usage(conn: Connection, values: dict[str, Any]) -> int:
    result = conn.execute(insert(InventoryUsage).values(**values))
    return int(result.inserted_primary_key[0])


def update_usage(
    conn: Connection, usage_id: int, expected_status: str, values: dict[str, Any]
) -> bool:
    """
    Update a usage row only if its status has not changed since it was read.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        usage_id (int): InventoryUsage ID.
        expected_status (str): Status read earlier in the same transaction.
        values (dict[str, Any]): Fields to update.

    Returns:
        bool: True if the row was updated.
    """
    stmt = (
        update(InventoryUsage)
        .where(InventoryUsage.id == usage_id, InventoryUsage.status == expected_status)
        .values(**values)
    )
    return conn.execute(stmt).rowcount == 1


def insert_laundry_batches(conn: Connection, rows: list[dict[str, Any]]) -> None:
    """
    Queue dirty items for laundry.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        rows (list[dict[str, Any]]): One row per item type.
    """
    if not rows:
        return
    conn.execute(insert(LaundryBatch), rows)
    logger.info(f"Queued {sum(r['quantity'] for r in rows)} dirty items for laundry")
