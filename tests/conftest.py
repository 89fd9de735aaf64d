"""
Shared fixtures.

DATABASE_URL must exist before front_desk.config is imported, so it is set at
module import time, ahead of any test module.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("HOTEL_TIMEZONE", "America/Bogota")

from datetime import date, datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from front_desk.db.engine import make_engine  # noqa: E402
from front_desk.db.writers.bookings import insert_booking, insert_payment  # noqa: E402
from front_desk.models.base import Base  # noqa: E402
from front_desk.models.bookings import Booking  # noqa: E402, F401
from front_desk.models.inventory import InventoryItem, RoomItem  # noqa: E402
from front_desk.models.rooms import Room  # noqa: E402
from front_desk.models.shifts import Shift  # noqa: E402, F401
from front_desk.services.booking_lifecycle import BookingLifecycle  # noqa: E402

# 10:00 in Bogota (UTC-5) on 2025-03-10
NOW = datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)
TODAY = date(2025, 3, 10)

READY_FLAGS = {
    "room_clean": True,
    "inventory_verified": True,
    "inventory_delivered": True,
    "passengers_completed": True,
}

TOWEL_ID, SHEET_ID, SOAP_ID = 1, 2, 3


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database with the full schema, dropped after the test."""
    test_engine = make_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(test_engine)

    yield test_engine

    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def room(db_engine: Engine) -> str:
    """
    Room 101 configured with 2 towels, 1 sheet set (bedding) and 2 soaps.

    Towels and sheets are reusable; soap is a consumable.
    """
    with db_engine.begin() as conn:
        conn.execute(insert(Room).values(room_number="101", status="reserved"))
        conn.execute(
            insert(InventoryItem),
            [
                {"id": TOWEL_ID, "name": "Towel", "category": "towels", "is_reusable": True},
                {"id": SHEET_ID, "name": "Sheet set", "category": "bedding", "is_reusable": True},
                {"id": SOAP_ID, "name": "Soap", "category": "toiletries", "is_reusable": False},
            ],
        )
        conn.execute(
            insert(RoomItem),
            [
                {"room_number": "101", "item_id": TOWEL_ID, "quantity": 2},
                {"room_number": "101", "item_id": SHEET_ID, "quantity": 1},
                {"room_number": "101", "item_id": SOAP_ID, "quantity": 2},
            ],
        )
    return "101"


@pytest.fixture
def lifecycle(db_engine: Engine) -> BookingLifecycle:
    return BookingLifecycle(db_engine)


@pytest.fixture
def make_booking(db_engine: Engine, room: str) -> Callable[..., int]:
    """
    Insert a booking row directly, bypassing the lifecycle.

    Defaults: 2 nights from today, room amount 150000, status pending.
    """

    def _make(**overrides: Any) -> int:
        values: dict[str, Any] = {
            "room_number": room,
            "guest_id": 500,
            "check_in": TODAY,
            "check_out": TODAY + timedelta(days=2),
            "nights": 2,
            "guest_count": 1,
            "total_amount": Decimal("150000"),
            "status": "pending",
        }
        values.update(overrides)
        with db_engine.begin() as conn:
            return insert_booking(conn, values)

    return _make


@pytest.fixture
def add_payment(db_engine: Engine) -> Callable[..., int]:
    """Insert a payment row directly (no shift attribution, no status advance)."""

    def _add(booking_id: int, amount: Any, status: str = "completed", method: str = "cash") -> int:
        with db_engine.begin() as conn:
            return insert_payment(
                conn,
                {
                    "booking_id": booking_id,
                    "amount": Decimal(str(amount)),
                    "method": method,
                    "status": status,
                    "payment_type": "partial",
                },
            )

    return _add
