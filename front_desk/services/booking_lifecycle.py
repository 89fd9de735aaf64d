"""
Booking lifecycle orchestration.

``BookingLifecycle`` runs every booking state change inside one database
transaction: it re-reads the booking, reconciles its money, checks guards from
``state_machine``, writes the new status only if the status is still the one it
read, and applies side effects (inventory usage, shift counters, room
occupancy, laundry, credits) on the same connection.

Every public operation returns a ``TransitionResult``. Domain failures and
storage failures are translated into the error taxonomy here; no raw
SQLAlchemy exception reaches callers.
"""

from __future__ import annotations

import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional, Sequence

import pydantic
import structlog
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from front_desk.config import CREDIT_VALIDITY_DAYS
from front_desk.db.readers.bookings import (
    booking_snapshot,
    get_booking,
    get_extra_charges,
    get_payment,
    get_payments,
    list_bookings_by_status,
)
from front_desk.db.readers.rooms import get_room
from front_desk.db.readers.shifts import get_open_shift
from front_desk.db.writers.bookings import (
    insert_booking,
    insert_credit,
    insert_extra_charge,
    insert_payment,
    update_booking,
    update_booking_status,
    update_payment,
)
from front_desk.errors import (
    ConflictError,
    FrontDeskError,
    InvalidStateTransition,
    NotFoundError,
    PreconditionsNotMet,
    ValidationError,
)
from front_desk.metrics import booking_transitions, payments_recorded, transition_duration
from front_desk.models.enums import BookingStatus, CreditStatus, PaymentMethod, PaymentStatus, PaymentType
from front_desk.schemas.financials import Financials
from front_desk.schemas.inventory import ItemReturn
from front_desk.schemas.results import CreditInfo, TransitionResult
from front_desk.services import inventory_ledger, shift_ledger
from front_desk.services.collaborators import (
    LaundryQueue,
    PassengerRegistry,
    RoomAvailability,
    SqlLaundryQueue,
    SqlPassengerRegistry,
    SqlRoomAvailability,
)
from front_desk.services.reconciliation import payment_counts, reconcile
from front_desk.services.state_machine import (
    AWAITING_ARRIVAL_STATUSES,
    PRE_CHECK_IN_STATUSES,
    ensure_transition,
    is_awaiting_check_in,
    is_awaiting_check_out,
    is_overdue,
    is_terminal,
    payment_target,
    pending_check_in_steps,
    pending_check_out_steps,
)
from front_desk.utils.datetime import (
    add_days,
    count_nights,
    hotel_today,
    is_before_today,
    to_stay_date,
    validate_stay,
)

logger = structlog.get_logger(__name__)

Operation = Callable[[Connection], TransitionResult]


def _amount(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise ValidationError(f"{field} must be a number", **{field: value}) from e
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field} must be greater than zero", **{field: str(value)})
    return amount


def _count(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number", **{field: value})
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise ValidationError(f"{field} must be a whole number", **{field: value}) from e
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"{field} must be a whole number", **{field: str(value)})
    return int(number)


def _enum(enum_cls: Any, value: Any, field: str) -> Any:
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError as e:
        raise ValidationError(f"Unknown {field}: {value!r}") from e


def _with_financials(exc: FrontDeskError, financials: Financials) -> FrontDeskError:
    # Failed results report the money state the guard actually evaluated
    exc.financials = financials  # type: ignore[attr-defined]
    return exc


class BookingLifecycle:
    """
    Guarded booking state machine with its financial and inventory side effects.

    Args:
        engine: Database engine; each operation opens its own transaction
        rooms: Room availability collaborator
        passengers: Passenger registration collaborator
        laundry: Laundry collaborator receiving dirty-item batches
        credit_validity_days: Validity of credits issued on paid cancellations

    Example:
        >>> lifecycle = BookingLifecycle(engine)
        >>> result = lifecycle.check_in(booking_id=42, now=utc_now(), operator_id=7)
        >>> result.success, result.pending_steps
        (False, ['register passengers'])
    """

    def __init__(
        self,
        engine: Engine,
        rooms: Optional[RoomAvailability] = None,
        passengers: Optional[PassengerRegistry] = None,
        laundry: Optional[LaundryQueue] = None,
        credit_validity_days: int = CREDIT_VALIDITY_DAYS,
    ) -> None:
        self.engine = engine
        self.rooms = rooms or SqlRoomAvailability()
        self.passengers = passengers or SqlPassengerRegistry()
        self.laundry = laundry or SqlLaundryQueue()
        self.credit_validity_days = credit_validity_days

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _run(self, transition: str, booking_id: Optional[int], operation: Operation) -> TransitionResult:
        started = time.perf_counter()
        try:
            with self.engine.begin() as conn:
                result = operation(conn)
        except FrontDeskError as e:
            error = e
        except IntegrityError as e:
            logger.warning("booking_integrity_violation", transition=transition, booking_id=booking_id)
            error = ConflictError("INTEGRITY_VIOLATION", f"Conflicting write during {transition}")
            error.__cause__ = e
        except SQLAlchemyError as e:
            logger.exception("booking_storage_error", transition=transition, booking_id=booking_id)
            error = ConflictError(
                "STORAGE_ERROR", f"Storage failure during {transition}; re-fetch and retry"
            )
            error.__cause__ = e
        else:
            booking_transitions.labels(transition=transition, outcome="success").inc()
            return result
        finally:
            transition_duration.labels(transition=transition).observe(time.perf_counter() - started)

        booking_transitions.labels(transition=transition, outcome=error.kind).inc()
        logger.warning(
            "booking_transition_failed",
            transition=transition,
            booking_id=booking_id,
            kind=error.kind,
            reason=error.message,
        )
        status, financials = self._current_state(booking_id)
        return TransitionResult.failure(
            error,
            status=status,
            booking_id=booking_id,
            financials=getattr(error, "financials", None) or financials,
        )

    def _current_state(self, booking_id: Optional[int]) -> tuple[Optional[str], Optional[Financials]]:
        if booking_id is None:
            return None, None
        try:
            with self.engine.connect() as conn:
                snapshot = booking_snapshot(conn, booking_id)
        except SQLAlchemyError:
            logger.exception("booking_state_unavailable", booking_id=booking_id)
            return None, None
        if snapshot is None:
            return None, None
        financials = reconcile(snapshot["booking"], snapshot["payments"], snapshot["extra_charges"])
        return snapshot["booking"].status, financials

    def _load(self, conn: Connection, booking_id: int) -> Row:
        booking = get_booking(conn, booking_id, for_update=True)
        if booking is None or booking.is_archived:
            raise NotFoundError("Booking", booking_id)
        return booking

    def _financials(self, conn: Connection, booking: Row) -> Financials:
        return reconcile(
            booking, get_payments(conn, booking.id), get_extra_charges(conn, booking.id)
        )

    def _move(
        self,
        conn: Connection,
        booking_id: int,
        current: BookingStatus,
        target: BookingStatus,
        values: Optional[dict[str, Any]] = None,
    ) -> None:
        ensure_transition(current.value, target.value)
        if not update_booking_status(conn, booking_id, current.value, target.value, values):
            latest = get_booking(conn, booking_id)
            raise InvalidStateTransition(
                latest.status if latest is not None else current.value,
                target.value,
                f"Booking {booking_id} changed status concurrently; re-fetch and retry",
            )
        logger.info(
            "booking_status_changed",
            booking_id=booking_id,
            from_status=current.value,
            to_status=target.value,
        )

    def _advance_for_payment(self, conn: Connection, booking_id: int) -> tuple[Row, Financials]:
        booking = self._load(conn, booking_id)
        financials = self._financials(conn, booking)
        status = BookingStatus(booking.status)
        target = payment_target(status.value, financials)

        while status is not target:
            step = BookingStatus.CONFIRMED if status is BookingStatus.PENDING else BookingStatus.PAID
            self._move(conn, booking_id, status, step)
            status = step

        return self._load(conn, booking_id), financials

    def _operator_shift_id(self, conn: Connection, operator_id: Optional[int]) -> Optional[int]:
        if operator_id is None:
            return None
        shift = get_open_shift(conn, operator_id)
        if shift is None:
            logger.info("no_open_shift", operator_id=operator_id)
            return None
        return int(shift.id)

    def _readiness_result(self, conn: Connection, booking_id: int, **data: Any) -> TransitionResult:
        booking = self._load(conn, booking_id)
        financials = self._financials(conn, booking)
        return TransitionResult(
            success=True,
            status=booking.status,
            booking_id=booking_id,
            pending_steps=pending_check_in_steps(booking, financials),
            financials=financials,
            data=data,
        )

    def _require_pre_check_in(self, booking: Row, operation: str) -> None:
        if BookingStatus(booking.status) not in PRE_CHECK_IN_STATUSES:
            raise InvalidStateTransition(
                booking.status, operation, f"Cannot {operation.replace('_', ' ')} once a booking is {booking.status}"
            )

    # ------------------------------------------------------------------
    # Creation and payments
    # ------------------------------------------------------------------

    def create_booking(
        self,
        room_number: str,
        guest_id: int,
        check_in: Any,
        check_out: Any,
        total_amount: Any,
        now: datetime,
        guest_count: int = 1,
        operator_id: Optional[int] = None,
    ) -> TransitionResult:
        """
        Create a pending booking.

        Args:
            room_number: Room reserved
            guest_id: Guest holding the reservation
            check_in: Arrival date (date or "YYYY-MM-DD")
            check_out: Departure date, strictly after arrival
            total_amount: Room amount for the stay, must be positive
            now: Reference instant
            guest_count: Guests expected, at least 1
            operator_id: Operator creating it; counted on their open shift

        Returns:
            TransitionResult with data["booking_id"]
        """

        def op(conn: Connection) -> TransitionResult:
            nights = validate_stay(check_in, check_out)
            arrival, departure = to_stay_date(check_in), to_stay_date(check_out)
            if is_before_today(arrival, now):
                raise ValidationError(
                    "Check-in date cannot be in the past", check_in=arrival.isoformat()
                )
            amount = _amount(total_amount, "total_amount")
            guests = _count(guest_count, "guest_count")
            if guests < 1:
                raise ValidationError("Guest count must be at least 1", guest_count=guests)
            if get_room(conn, room_number) is None:
                raise NotFoundError("Room", room_number)

            booking_id = insert_booking(
                conn,
                {
                    "room_number": room_number,
                    "guest_id": guest_id,
                    "check_in": arrival,
                    "check_out": departure,
                    "nights": nights,
                    "guest_count": guests,
                    "total_amount": amount,
                    "status": BookingStatus.PENDING.value,
                    "created_by": operator_id,
                },
            )

            shift_id = self._operator_shift_id(conn, operator_id)
            if shift_id is not None:
                shift_ledger.record_booking_created(conn, shift_id)

            logger.info("booking_created", booking_id=booking_id, room_number=room_number, nights=nights)
            booking = self._load(conn, booking_id)
            return TransitionResult(
                success=True,
                status=booking.status,
                booking_id=booking_id,
                financials=self._financials(conn, booking),
                data={"booking_id": booking_id, "shift_id": shift_id},
            )

        return self._run("create", None, op)

    def record_payment(
        self,
        booking_id: int,
        amount: Any,
        method: str,
        now: datetime,
        status: str = PaymentStatus.COMPLETED.value,
        payment_type: Optional[str] = None,
        operator_id: Optional[int] = None,
    ) -> TransitionResult:
        """
        Record a payment reported by the payment collaborator and advance status.

        Accepted payments (authorized, completed) taken while the operator has
        an open shift are attributed to it and added to its totals. The booking
        then moves pending -> confirmed once anything is paid and on to paid once
        nothing is pending.

        Args:
            booking_id: Booking paid for
            amount: Payment amount, must be positive
            method: cash, card or transfer
            now: Reference instant
            status: Final payment status reported by the gateway
            payment_type: full or partial; derived from the balance when omitted
            operator_id: Processing operator

        Returns:
            TransitionResult with data["payment_id"] and data["shift_id"]
        """

        def op(conn: Connection) -> TransitionResult:
            value = _amount(amount, "amount")
            pay_method = _enum(PaymentMethod, method, "payment method")
            pay_status = _enum(PaymentStatus, status, "payment status")

            booking = self._load(conn, booking_id)
            if is_terminal(booking.status):
                raise InvalidStateTransition(
                    booking.status,
                    "record_payment",
                    f"Cannot record a payment on a {booking.status} booking",
                )

            before = self._financials(conn, booking)
            if payment_type is None:
                kind = PaymentType.FULL if value >= before.pending else PaymentType.PARTIAL
            else:
                kind = _enum(PaymentType, payment_type, "payment type")

            accepted = payment_counts({"status": pay_status.value})
            shift_id = self._operator_shift_id(conn, operator_id) if accepted else None

            payment_id = insert_payment(
                conn,
                {
                    "booking_id": booking_id,
                    "amount": value,
                    "method": pay_method.value,
                    "status": pay_status.value,
                    "payment_type": kind.value,
                    "processed_by": operator_id,
                    "shift_id": shift_id,
                },
            )
            if shift_id is not None:
                shift_ledger.record_payment(conn, shift_id, pay_method.value, value)

            payments_recorded.labels(method=pay_method.value, status=pay_status.value).inc()
            logger.info(
                "payment_recorded",
                booking_id=booking_id,
                payment_id=payment_id,
                amount=str(value),
                method=pay_method.value,
                status=pay_status.value,
                shift_id=shift_id,
            )

            booking, financials = self._advance_for_payment(conn, booking_id)
            return TransitionResult(
                success=True,
                status=booking.status,
                booking_id=booking_id,
                financials=financials,
                data={"payment_id": payment_id, "shift_id": shift_id},
            )

        return self._run("record_payment", booking_id, op)

    def update_payment_status(
        self,
        payment_id: int,
        status: str,
        now: datetime,
        operator_id: Optional[int] = None,
    ) -> TransitionResult:
        """
        Apply a staff correction to a payment's status.

        A payment accepted while it has no shift is attributed to the
        operator's open shift. A payment that stops counting is taken back out
        of its shift totals and detached while that shift is still open, so a
        later re-acceptance is counted again. Booking status is advanced when
        the correction completes the payment; it is never moved backwards.

        Args:
            payment_id: Payment to correct
            status: New payment status
            now: Reference instant
            operator_id: Operator making the correction

        Returns:
            TransitionResult for the payment's booking
        """
        booking_ref: dict[str, Optional[int]] = {"id": None}

        def op(conn: Connection) -> TransitionResult:
            new_status = _enum(PaymentStatus, status, "payment status")
            payment = get_payment(conn, payment_id)
            if payment is None:
                raise NotFoundError("Payment", payment_id)
            booking_ref["id"] = payment.booking_id
            booking = self._load(conn, payment.booking_id)

            was_accepted = payment_counts(payment)
            now_accepted = payment_counts({"status": new_status.value})
            values: dict[str, Any] = {"status": new_status.value}

            if now_accepted and not was_accepted and payment.shift_id is None:
                shift_id = self._operator_shift_id(conn, operator_id)
                if shift_id is not None:
                    shift_ledger.record_payment(conn, shift_id, payment.method, payment.amount)
                    values["shift_id"] = shift_id
            elif was_accepted and not now_accepted and payment.shift_id is not None:
                if shift_ledger.reverse_payment(conn, payment.shift_id, payment.method, payment.amount):
                    values["shift_id"] = None

            update_payment(conn, payment_id, values)
            logger.info(
                "payment_status_corrected",
                payment_id=payment_id,
                booking_id=payment.booking_id,
                from_status=payment.status,
                to_status=new_status.value,
                operator_id=operator_id,
            )

            if is_terminal(booking.status):
                booking = self._load(conn, payment.booking_id)
                financials = self._financials(conn, booking)
            else:
                booking, financials = self._advance_for_payment(conn, payment.booking_id)

            return TransitionResult(
                success=True,
                status=booking.status,
                booking_id=booking.id,
                financials=financials,
                data={"payment_id": payment_id},
            )

        result = self._run("update_payment_status", None, op)
        if not result.success and result.booking_id is None and booking_ref["id"] is not None:
            result.booking_id = booking_ref["id"]
            result.status, _ = self._current_state(booking_ref["id"])
        return result

    def add_extra_charge(
        self,
        booking_id: int,
        description: str,
        amount: Any,
        now: datetime,
        quantity: int = 1,
    ) -> TransitionResult:
        """Add a consumption or service charge to an in-house booking."""

        def op(conn: Connection) -> TransitionResult:
            if not description or not description.strip():
                raise ValidationError("Extra charge needs a description")
            value = _amount(amount, "amount")
            units = _count(quantity, "quantity")
            if units < 1:
                raise ValidationError("Quantity must be at least 1", quantity=units)

            booking = self._load(conn, booking_id)
            if BookingStatus(booking.status) is not BookingStatus.CHECKED_IN:
                raise InvalidStateTransition(
                    booking.status,
                    "add_extra_charge",
                    "Extra charges can only be added while the guest is checked in",
                )

            charge_id = insert_extra_charge(
                conn,
                {
                    "booking_id": booking_id,
                    "description": description.strip(),
                    "amount": value,
                    "quantity": units,
                },
            )
            logger.info("extra_charge_added", booking_id=booking_id, charge_id=charge_id, amount=str(value))
            return TransitionResult(
                success=True,
                status=booking.status,
                booking_id=booking_id,
                financials=self._financials(conn, booking),
                data={"extra_charge_id": charge_id},
            )

        return self._run("add_extra_charge", booking_id, op)

    # ------------------------------------------------------------------
    # Readiness flags
    # ------------------------------------------------------------------

    def mark_room_clean(self, booking_id: int, now: datetime, clean: bool = True) -> TransitionResult:
        """Record housekeeping's confirmation that the booked room is ready."""

        def op(conn: Connection) -> TransitionResult:
            booking = self._load(conn, booking_id)
            self._require_pre_check_in(booking, "mark_room_clean")
            update_booking(conn, booking_id, {"room_clean": bool(clean)})
            logger.info("room_clean_updated", booking_id=booking_id, clean=bool(clean))
            return self._readiness_result(conn, booking_id)

        return self._run("mark_room_clean", booking_id, op)

    def update_inventory_status(
        self,
        booking_id: int,
        now: datetime,
        verified: Optional[bool] = None,
        delivered: Optional[bool] = None,
        actor: Optional[int] = None,
    ) -> TransitionResult:
        """
        Set the inventory verified and/or delivered flags before check-in.

        Setting a flag stamps its timestamp (and the delivering actor); clearing
        it removes them.
        """

        def op(conn: Connection) -> TransitionResult:
            if verified is None and delivered is None:
                raise ValidationError("Nothing to update: pass verified and/or delivered")

            booking = self._load(conn, booking_id)
            self._require_pre_check_in(booking, "update_inventory_status")

            values: dict[str, Any] = {}
            if verified is not None:
                values["inventory_verified"] = bool(verified)
                values["inventory_verified_at"] = now if verified else None
            if delivered is not None:
                values["inventory_delivered"] = bool(delivered)
                values["inventory_delivered_at"] = now if delivered else None
                values["inventory_delivered_by"] = actor if delivered else None
            update_booking(conn, booking_id, values)

            logger.info(
                "inventory_status_updated",
                booking_id=booking_id,
                verified=verified,
                delivered=delivered,
                actor=actor,
            )
            return self._readiness_result(conn, booking_id)

        return self._run("update_inventory_status", booking_id, op)

    def refresh_passengers(self, booking_id: int, now: datetime) -> TransitionResult:
        """
        Re-evaluate passengers_completed from the registration collaborator.

        Complete when the registered count reaches the booking's guest count.
        """

        def op(conn: Connection) -> TransitionResult:
            booking = self._load(conn, booking_id)
            self._require_pre_check_in(booking, "refresh_passengers")

            registered = self.passengers.count_registered(conn, booking_id)
            required = booking.guest_count or 1
            complete = registered >= required
            update_booking(
                conn,
                booking_id,
                {
                    "passengers_completed": complete,
                    "passengers_completed_at": now if complete else None,
                },
            )
            logger.info(
                "passengers_refreshed",
                booking_id=booking_id,
                registered=registered,
                required=required,
            )
            return self._readiness_result(conn, booking_id, registered=registered, required=required)

        return self._run("refresh_passengers", booking_id, op)

    # ------------------------------------------------------------------
    # Check-in / check-out / cancel
    # ------------------------------------------------------------------

    def check_in_status(self, booking_id: int, now: datetime) -> TransitionResult:
        """Read-only readiness report: pending steps and financials, no writes."""

        def op(conn: Connection) -> TransitionResult:
            booking = self._load(conn, booking_id)
            financials = self._financials(conn, booking)
            steps = pending_check_in_steps(booking, financials)
            today = hotel_today(now)
            return TransitionResult(
                success=True,
                status=booking.status,
                booking_id=booking_id,
                pending_steps=steps,
                financials=financials,
                data={
                    "ready": not steps,
                    "awaiting_check_in": is_awaiting_check_in(booking, today),
                    "overdue": is_overdue(booking, today),
                },
            )

        return self._run("check_in_status", booking_id, op)

    def check_in(self, booking_id: int, now: datetime, operator_id: Optional[int] = None) -> TransitionResult:
        """
        Check a guest in.

        Requires a paid booking with room clean, inventory verified and
        delivered, passengers registered and nothing pending. Unmet gates fail
        with PreconditionsNotMet listing exactly those steps. On success the
        room's configured items are assigned, the room is marked occupied and
        the operator's shift counts the check-in.
        """

        def op(conn: Connection) -> TransitionResult:
            booking = self._load(conn, booking_id)
            status = BookingStatus(booking.status)
            if status not in PRE_CHECK_IN_STATUSES:
                raise InvalidStateTransition(status.value, BookingStatus.CHECKED_IN.value)

            booking, financials = self._advance_for_payment(conn, booking_id)
            status = BookingStatus(booking.status)

            steps = pending_check_in_steps(booking, financials)
            if steps:
                raise _with_financials(PreconditionsNotMet(steps), financials)

            self._move(
                conn,
                booking_id,
                status,
                BookingStatus.CHECKED_IN,
                {"actual_check_in": now},
            )
            usage_ids = inventory_ledger.assign_room_items(conn, booking_id, booking.room_number, now)
            self.rooms.mark_occupied(conn, booking.room_number)

            shift_id = self._operator_shift_id(conn, operator_id)
            if shift_id is not None:
                shift_ledger.record_check_in(conn, shift_id)

            logger.info(
                "booking_checked_in",
                booking_id=booking_id,
                room_number=booking.room_number,
                shift_id=shift_id,
            )
            return TransitionResult(
                success=True,
                status=BookingStatus.CHECKED_IN.value,
                booking_id=booking_id,
                financials=financials,
                data={"inventory_usage_ids": usage_ids, "shift_id": shift_id},
            )

        return self._run("check_in", booking_id, op)

    def _check_out_updates(
        self,
        booking: Row,
        now: datetime,
        override_date: Any,
        discount_amount: Any,
        discount_reason: Optional[str],
        operator_id: Optional[int],
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}

        if override_date is not None:
            day = to_stay_date(override_date)
            arrival = to_stay_date(booking.check_in)
            if day > hotel_today(now):
                raise ValidationError(
                    "Check-out override date cannot be in the future", override_date=day.isoformat()
                )
            if day < arrival:
                raise ValidationError(
                    "Check-out override date cannot be before check-in", override_date=day.isoformat()
                )
            # Same-day departures still bill one night
            effective = max(day, add_days(arrival, 1))
            values["check_out"] = effective
            values["nights"] = count_nights(arrival, effective)

        if discount_amount is not None:
            discount = _amount(discount_amount, "discount_amount")
            if not discount_reason or not discount_reason.strip():
                raise ValidationError("A discount needs a reason")
            if discount > Decimal(booking.total_amount):
                raise ValidationError(
                    "Discount cannot exceed the room amount",
                    discount_amount=str(discount),
                    room_amount=str(booking.total_amount),
                )
            values["discount_amount"] = discount
            values["discount_reason"] = discount_reason.strip()
            values["discount_applied_by"] = operator_id

        return values

    def check_out(
        self,
        booking_id: int,
        now: datetime,
        operator_id: Optional[int] = None,
        override_date: Optional[Any] = None,
        discount_amount: Optional[Any] = None,
        discount_reason: Optional[str] = None,
        returns: Optional[Iterable[Any]] = None,
        force_inventory: bool = False,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """
        Check a guest out.

        An override date (early departure) recomputes nights; a discount with a
        reason reduces the payable room amount. Both are applied before the
        balance gate. Outstanding inventory is then settled and the room released.

        Args:
            booking_id: Checked-in booking
            now: Reference instant
            operator_id: Operator; counted on their open shift
            override_date: Actual departure day, not after today
            discount_amount: Discount on the room amount
            discount_reason: Required with a discount
            returns: Per-item counts (ItemReturn or dicts); items without a count
                are treated as fully returned
            force_inventory: Record unaccounted units as consumed
            notes: Check-out notes

        Returns:
            TransitionResult; data["inventory"] lists settled usage rows

        Example:
            >>> lifecycle.check_out(42, now=utc_now(), override_date=date(2025, 3, 3),
            ...                     discount_amount=50000, discount_reason="Left early")
        """

        def op(conn: Connection) -> TransitionResult:
            counts = self._parse_returns(returns)
            booking = self._load(conn, booking_id)
            status = BookingStatus(booking.status)
            ensure_transition(status.value, BookingStatus.COMPLETED.value)

            values = self._check_out_updates(
                booking, now, override_date, discount_amount, discount_reason, operator_id
            )
            if notes:
                values["checkout_notes"] = notes
            if values:
                update_booking(conn, booking_id, values)
                booking = self._load(conn, booking_id)

            financials = self._financials(conn, booking)
            steps = pending_check_out_steps(financials)
            if steps:
                raise _with_financials(PreconditionsNotMet(steps), financials)

            settled = inventory_ledger.settle_for_checkout(
                conn,
                booking_id,
                booking.room_number,
                now,
                self.laundry,
                returns=counts,
                force=force_inventory,
            )

            self._move(
                conn,
                booking_id,
                status,
                BookingStatus.COMPLETED,
                {"actual_check_out": now},
            )
            self.rooms.mark_available(conn, booking.room_number)

            shift_id = self._operator_shift_id(conn, operator_id)
            if shift_id is not None:
                shift_ledger.record_check_out(conn, shift_id)

            logger.info(
                "booking_checked_out",
                booking_id=booking_id,
                room_number=booking.room_number,
                nights=booking.nights,
                discount=str(booking.discount_amount),
                shift_id=shift_id,
            )
            return TransitionResult(
                success=True,
                status=BookingStatus.COMPLETED.value,
                booking_id=booking_id,
                financials=financials,
                data={"inventory": settled, "nights": booking.nights, "shift_id": shift_id},
            )

        return self._run("check_out", booking_id, op)

    @staticmethod
    def _parse_returns(returns: Optional[Iterable[Any]]) -> list[ItemReturn]:
        parsed: list[ItemReturn] = []
        for entry in returns or []:
            if isinstance(entry, ItemReturn):
                parsed.append(entry)
                continue
            try:
                parsed.append(ItemReturn.model_validate(entry))
            except pydantic.ValidationError as e:
                raise ValidationError(f"Malformed inventory return: {e.errors()[0]['msg']}") from e
        return parsed

    def cancel(
        self,
        booking_id: int,
        reason: str,
        now: datetime,
        operator_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """
        Cancel a non-terminal booking.

        Money already collected is never dropped: when paid > 0 a credit for the
        paid amount is issued and returned in the result. Cancelling an in-house
        booking collects its outstanding inventory and releases the room.
        """

        def op(conn: Connection) -> TransitionResult:
            if not reason or not reason.strip():
                raise ValidationError("A cancellation reason is required")

            booking = self._load(conn, booking_id)
            status = BookingStatus(booking.status)
            ensure_transition(status.value, BookingStatus.CANCELLED.value)
            financials = self._financials(conn, booking)

            if status is BookingStatus.CHECKED_IN:
                inventory_ledger.settle_for_checkout(
                    conn, booking_id, booking.room_number, now, self.laundry
                )
                self.rooms.mark_available(conn, booking.room_number)

            self._move(
                conn,
                booking_id,
                status,
                BookingStatus.CANCELLED,
                {
                    "cancellation_reason": reason.strip(),
                    "cancelled_by": operator_id,
                    "cancelled_at": now,
                    "cancellation_notes": notes,
                },
            )

            credit = None
            if financials.paid > 0:
                credit = self._issue_credit(conn, booking, financials.paid, now, operator_id, reason)
                logger.warning(
                    "paid_booking_cancelled",
                    booking_id=booking_id,
                    paid=str(financials.paid),
                    credit_id=credit.id,
                )
            else:
                logger.info("booking_cancelled", booking_id=booking_id, from_status=status.value)

            return TransitionResult(
                success=True,
                status=BookingStatus.CANCELLED.value,
                booking_id=booking_id,
                financials=financials,
                credit=credit,
            )

        return self._run("cancel", booking_id, op)

    def _issue_credit(
        self,
        conn: Connection,
        booking: Row,
        amount: Decimal,
        now: datetime,
        operator_id: Optional[int],
        reason: str,
    ) -> CreditInfo:
        valid_until = add_days(hotel_today(now), self.credit_validity_days)
        credit_id = insert_credit(
            conn,
            {
                "booking_id": booking.id,
                "guest_id": booking.guest_id,
                "amount": amount,
                "status": CreditStatus.ACTIVE.value,
                "valid_until": valid_until,
                "reason": f"Cancellation of booking {booking.id}: {reason.strip()}",
                "created_by": operator_id,
            },
        )
        return CreditInfo(id=credit_id, amount=amount, valid_until=valid_until)

    def archive(self, booking_id: int, now: datetime) -> TransitionResult:
        """Soft-delete a completed or cancelled booking from work lists."""

        def op(conn: Connection) -> TransitionResult:
            booking = self._load(conn, booking_id)
            if not is_terminal(booking.status):
                raise InvalidStateTransition(
                    booking.status, "archive", "Only completed or cancelled bookings can be archived"
                )
            update_booking(conn, booking_id, {"is_archived": True})
            logger.info("booking_archived", booking_id=booking_id)
            return TransitionResult(success=True, status=booking.status, booking_id=booking_id)

        return self._run("archive", booking_id, op)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_financials(self, booking_id: int) -> Financials:
        """
        Reconcile a booking from its current rows.

        Raises:
            NotFoundError: Booking absent
        """
        with self.engine.connect() as conn:
            snapshot = booking_snapshot(conn, booking_id)
        if snapshot is None:
            raise NotFoundError("Booking", booking_id)
        return reconcile(snapshot["booking"], snapshot["payments"], snapshot["extra_charges"])

    def _work_list(
        self, now: datetime, statuses: Sequence[BookingStatus], predicate: Callable[[Row, date], bool]
    ) -> list[dict[str, Any]]:
        today = hotel_today(now)
        rows: list[dict[str, Any]] = []
        with self.engine.connect() as conn:
            for booking in list_bookings_by_status(conn, [s.value for s in statuses]):
                if not predicate(booking, today):
                    continue
                financials = self._financials(conn, booking)
                rows.append(
                    {
                        "booking_id": booking.id,
                        "room_number": booking.room_number,
                        "guest_id": booking.guest_id,
                        "status": booking.status,
                        "check_in": booking.check_in,
                        "check_out": booking.check_out,
                        "overdue": is_overdue(booking, today),
                        "pending_steps": pending_check_in_steps(booking, financials)
                        if BookingStatus(booking.status) in PRE_CHECK_IN_STATUSES
                        else pending_check_out_steps(financials),
                        "financials": financials,
                    }
                )
        return rows

    def list_awaiting_check_in(self, now: datetime) -> list[dict[str, Any]]:
        """Confirmed or paid bookings due to arrive by today and not overdue."""
        return self._work_list(now, sorted(AWAITING_ARRIVAL_STATUSES), is_awaiting_check_in)

    def list_awaiting_check_out(self, now: datetime) -> list[dict[str, Any]]:
        """
        In-house bookings plus overdue ones (flagged ``overdue``).

        Overdue bookings never checked in also block the room, so they share
        this list; they are flagged, never cancelled automatically.
        """
        statuses = sorted(AWAITING_ARRIVAL_STATUSES | {BookingStatus.CHECKED_IN})
        return self._work_list(now, statuses, is_awaiting_check_out)
