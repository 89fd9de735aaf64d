"""
Prometheus metrics for booking transitions, payments, shifts and inventory.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from front_desk.metrics import booking_transitions
    >>> booking_transitions.labels(transition="check_in", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Lifecycle Metrics
# =============================================================================

booking_transitions = Counter(
    "front_desk_booking_transitions_total",
    "Booking lifecycle operations by outcome",
    ["transition", "outcome"],
)
"""
Counter for booking lifecycle operations.

Labels:
    transition: Operation name (create, record_payment, check_in, check_out, cancel, ...)
    outcome: success or the error kind that blocked it
"""

transition_duration = Histogram(
    "front_desk_transition_duration_seconds",
    "Duration of booking lifecycle operations in seconds",
    ["transition"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for lifecycle operation duration, including the database transaction.

Labels:
    transition: Operation name
"""

payments_recorded = Counter(
    "front_desk_payments_recorded_total",
    "Payments recorded against bookings",
    ["method", "status"],
)
"""
Counter for recorded payments.

Labels:
    method: cash, card or transfer
    status: authorized, completed, pending or failed
"""

# =============================================================================
# Shift Metrics
# =============================================================================

shift_events = Counter(
    "front_desk_shift_events_total",
    "Shift ledger events",
    ["event"],
)
"""
Counter for shift ledger events.

Labels:
    event: opened, open_rejected, closed, force_closed
"""

shift_cash_difference = Histogram(
    "front_desk_shift_cash_difference",
    "Counted minus expected cash at shift close",
    buckets=(-100000, -10000, -1000, 0, 1000, 10000, 100000, float("inf")),
)

# =============================================================================
# Inventory Metrics
# =============================================================================

inventory_transitions = Counter(
    "front_desk_inventory_transitions_total",
    "Inventory usage status transitions",
    ["target"],
)
