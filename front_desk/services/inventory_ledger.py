"""
Inventory usage ledger.

Tracks the physical items assigned to a booking at check-in and how they leave
the room: returned, consumed or damaged. Status changes follow a strict graph;
terminal rows are never reopened. Returned reusable items are handed to the
laundry queue keyed by room and booking.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

import structlog
from sqlalchemy.engine import Connection, Row

from front_desk.db.readers.inventory import get_room_items, get_usage, list_usages
from front_desk.db.writers.inventory import insert_usage, update_usage
from front_desk.errors import (
    ConflictError,
    InvalidStateTransition,
    NotFoundError,
    PreconditionsNotMet,
    ValidationError,
)
from front_desk.metrics import inventory_transitions
from front_desk.models.enums import UsageStatus
from front_desk.schemas.inventory import DirtyItem, ItemReturn
from front_desk.services.collaborators import LaundryQueue

logger = structlog.get_logger(__name__)

ALLOWED_TRANSITIONS: dict[UsageStatus, frozenset[UsageStatus]] = {
    UsageStatus.ASSIGNED: frozenset(
        {UsageStatus.IN_USE, UsageStatus.RETURNED, UsageStatus.CONSUMED, UsageStatus.DAMAGED}
    ),
    UsageStatus.IN_USE: frozenset(
        {UsageStatus.RETURNED, UsageStatus.CONSUMED, UsageStatus.DAMAGED}
    ),
    UsageStatus.RETURNED: frozenset(),
    UsageStatus.CONSUMED: frozenset(),
    UsageStatus.DAMAGED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Laundry handles bedding first so rooms can be turned over
HIGH_PRIORITY_CATEGORIES = frozenset({"bedding"})


def can_transition(current: str, target: str) -> bool:
    try:
        return UsageStatus(target) in ALLOWED_TRANSITIONS[UsageStatus(current)]
    except ValueError:
        return False


def is_terminal(status: str) -> bool:
    return UsageStatus(status) in TERMINAL_STATUSES


def _quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a whole number", quantity=value)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise ValidationError("Quantity must be a whole number", quantity=value) from e
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError("Quantity must be a whole number", quantity=str(value))
    if number <= 0:
        raise ValidationError("Quantity must be greater than zero", quantity=int(number))
    return int(number)


def _require_usage(conn: Connection, usage_id: int) -> Row:
    usage = get_usage(conn, usage_id)
    if usage is None:
        raise NotFoundError("InventoryUsage", usage_id)
    return usage


def _entry_values(usage: Row, target: UsageStatus, now: datetime) -> dict[str, Any]:
    values: dict[str, Any] = {"status": target.value, "updated_at": now}
    if target is UsageStatus.RETURNED and usage.returned_at is None:
        values["returned_at"] = now
    if target is UsageStatus.ASSIGNED and usage.assigned_at is None:
        values["assigned_at"] = now
    return values


def assign(
    conn: Connection,
    booking_id: int,
    item_id: int,
    quantity: int,
    now: datetime,
    notes: Optional[str] = None,
) -> int:
    """
    Assign an item type to a booking.

    Args:
        conn: Active connection (caller owns the transaction)
        booking_id: Booking receiving the items
        item_id: Inventory item type
        quantity: Units handed over, must be positive
        now: Assignment instant
        notes: Free-text note

    Returns:
        New InventoryUsage ID

    Raises:
        ValidationError: If quantity <= 0
    """
    units = _quantity(quantity)

    usage_id = insert_usage(
        conn,
        {
            "booking_id": booking_id,
            "item_id": item_id,
            "quantity_assigned": units,
            "status": UsageStatus.ASSIGNED.value,
            "assigned_at": now,
            "notes": notes,
        },
    )
    logger.info("inventory_assigned", booking_id=booking_id, item_id=item_id, quantity=units)
    return usage_id


def assign_room_items(
    conn: Connection, booking_id: int, room_number: str, now: datetime
) -> list[int]:
    """
    Create one usage row per configured room item not already held by the booking.

    Args:
        conn: Active connection
        booking_id: Booking being checked in
        room_number: Room whose configured items are assigned
        now: Assignment instant

    Returns:
        IDs of the usage rows created
    """
    held = {u.item_id for u in list_usages(conn, booking_id) if not is_terminal(u.status)}
    created = [
        assign(conn, booking_id, item.item_id, item.quantity, now)
        for item in get_room_items(conn, room_number)
        if item.item_id not in held
    ]
    if not created:
        logger.info("no_room_items_assigned", booking_id=booking_id, room_number=room_number)
    return created


def transition(conn: Connection, usage_id: int, target: str, now: datetime) -> Row:
    """
    Move a usage row to a new status along the allowed graph.

    Args:
        conn: Active connection
        usage_id: InventoryUsage ID
        target: Target status value
        now: Transition instant (stamps returned_at on entering returned)

    Returns:
        Updated usage row

    Raises:
        ValidationError: Unknown target status
        NotFoundError: Usage row absent
        InvalidStateTransition: Target not reachable from the current status
        ConflictError: Row changed status concurrently
    """
    try:
        target_status = UsageStatus(target)
    except ValueError as e:
        raise ValidationError(f"Unknown inventory status: {target!r}") from e

    usage = _require_usage(conn, usage_id)
    if not can_transition(usage.status, target_status.value):
        raise InvalidStateTransition(usage.status, target_status.value)

    if not update_usage(conn, usage_id, usage.status, _entry_values(usage, target_status, now)):
        raise ConflictError("USAGE_CHANGED", f"Inventory usage {usage_id} changed concurrently")

    inventory_transitions.labels(target=target_status.value).inc()
    logger.info(
        "inventory_transitioned",
        usage_id=usage_id,
        from_status=usage.status,
        to_status=target_status.value,
    )
    return _require_usage(conn, usage_id)


def _adjust_counter(conn: Connection, usage_id: int, column: str, quantity: int) -> Row:
    units = _quantity(quantity)
    usage = _require_usage(conn, usage_id)
    if is_terminal(usage.status):
        raise ConflictError(
            "USAGE_TERMINAL", f"Inventory usage {usage_id} is already {usage.status}"
        )

    accounted = usage.quantity_consumed + usage.quantity_returned + units
    if accounted > usage.quantity_assigned:
        raise ValidationError(
            "Consumed plus returned cannot exceed assigned quantity",
            assigned=usage.quantity_assigned,
            accounted=accounted,
        )

    values = {column: getattr(usage, column) + units}
    if not update_usage(conn, usage_id, usage.status, values):
        raise ConflictError("USAGE_CHANGED", f"Inventory usage {usage_id} changed concurrently")
    return _require_usage(conn, usage_id)


def consume(conn: Connection, usage_id: int, quantity: int) -> Row:
    """Record units used up in the room (toiletries, minibar)."""
    return _adjust_counter(conn, usage_id, "quantity_consumed", quantity)


def return_items(conn: Connection, usage_id: int, quantity: int) -> Row:
    """Record units collected back from the room."""
    return _adjust_counter(conn, usage_id, "quantity_returned", quantity)


def settle_for_checkout(
    conn: Connection,
    booking_id: int,
    room_number: str,
    now: datetime,
    laundry: LaundryQueue,
    returns: Optional[Sequence[ItemReturn]] = None,
    force: bool = False,
) -> list[dict[str, Any]]:
    """
    Close every outstanding usage row of a booking.

    Usages without an explicit count are treated as fully returned. Explicit
    counts must account for every unit still in the room; with ``force`` the
    unaccounted units are recorded as consumed. Returned reusable units are
    queued for laundry in a single batch.

    Args:
        conn: Active connection
        booking_id: Booking being checked out
        room_number: Room the items leave
        now: Settlement instant
        laundry: Laundry collaborator
        returns: Staff counts per item type
        force: Record unaccounted units as consumed instead of failing

    Returns:
        One summary dict per settled usage

    Raises:
        ValidationError: Counts exceed what is in the room, repeat an item, or
            name an item the booking does not hold
        PreconditionsNotMet: Units unaccounted for and ``force`` is False
    """
    outstanding = [u for u in list_usages(conn, booking_id) if not is_terminal(u.status)]
    pending_counts: dict[int, ItemReturn] = {}
    for entry in returns or []:
        if entry.item_id in pending_counts:
            raise ValidationError("Item counted more than once", item_id=entry.item_id)
        pending_counts[entry.item_id] = entry

    unknown = set(pending_counts) - {u.item_id for u in outstanding}
    if unknown:
        raise ValidationError(
            "Returned items are not assigned to this booking", item_ids=sorted(unknown)
        )

    plans: list[dict[str, Any]] = []
    unaccounted: list[str] = []
    for usage in outstanding:
        in_room = usage.quantity_assigned - usage.quantity_consumed - usage.quantity_returned
        count = pending_counts.pop(usage.item_id, None)

        if count is None:
            returned, consumed, damaged, notes = in_room, 0, False, None
        else:
            if count.returned + count.consumed > in_room:
                raise ValidationError(
                    f"Counted more {usage.item_name} than assigned",
                    item_id=usage.item_id,
                    in_room=in_room,
                )
            returned, consumed, damaged, notes = (
                count.returned,
                count.consumed,
                count.damaged,
                count.notes,
            )
            leftover = in_room - returned - consumed
            if leftover > 0:
                if not force:
                    unaccounted.append(f"account for inventory: {usage.item_name}")
                    continue
                consumed += leftover

        total_returned = usage.quantity_returned + returned
        if damaged:
            target = UsageStatus.DAMAGED
        elif total_returned > 0:
            target = UsageStatus.RETURNED
        else:
            target = UsageStatus.CONSUMED

        plans.append(
            {
                "usage": usage,
                "returned": returned,
                "consumed": consumed,
                "target": target,
                "notes": notes,
            }
        )

    if unaccounted:
        raise PreconditionsNotMet(unaccounted)

    settled: list[dict[str, Any]] = []
    dirty: list[DirtyItem] = []
    for plan in plans:
        usage, target = plan["usage"], plan["target"]
        values = _entry_values(usage, target, now)
        values["quantity_returned"] = usage.quantity_returned + plan["returned"]
        values["quantity_consumed"] = usage.quantity_consumed + plan["consumed"]
        if plan["notes"]:
            values["notes"] = plan["notes"]

        if not update_usage(conn, usage.id, usage.status, values):
            raise ConflictError("USAGE_CHANGED", f"Inventory usage {usage.id} changed concurrently")
        inventory_transitions.labels(target=target.value).inc()

        if usage.is_reusable and plan["returned"] > 0 and target is not UsageStatus.DAMAGED:
            dirty.append(
                DirtyItem(
                    item_id=usage.item_id,
                    quantity=plan["returned"],
                    priority="high" if usage.item_category in HIGH_PRIORITY_CATEGORIES else "normal",
                )
            )

        settled.append(
            {
                "usage_id": usage.id,
                "item_id": usage.item_id,
                "status": target.value,
                "returned": values["quantity_returned"],
                "consumed": values["quantity_consumed"],
            }
        )

    if dirty:
        laundry.enqueue_dirty(conn, room_number, booking_id, dirty)

    logger.info("inventory_settled", booking_id=booking_id, usages=len(settled), dirty=len(dirty))
    return settled
