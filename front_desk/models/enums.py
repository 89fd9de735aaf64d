"""Status and category enumerations stored as plain strings."""

from __future__ import annotations

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"
    CHECKED_IN = "checked-in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    AUTHORIZED = "authorized"
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentType(str, Enum):
    FULL = "full"
    PARTIAL = "partial"


class UsageStatus(str, Enum):
    ASSIGNED = "assigned"
    IN_USE = "in_use"
    RETURNED = "returned"
    CONSUMED = "consumed"
    DAMAGED = "damaged"


class ShiftStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class CreditStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
