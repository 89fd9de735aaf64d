"""
Report and repair legacy bookings written outside the guarded state machine.

Lists cancelled bookings that were fully paid, cancelled bookings holding money
without a credit, and completed bookings that never checked out, each with the
suggested reclassification. Nothing is written without --apply.

Usage:
    python scripts/repair_legacy_bookings.py
    python scripts/repair_legacy_bookings.py --apply --actor 1
    python scripts/repair_legacy_bookings.py --apply --only 189 --only 204
"""

import argparse

import structlog

from front_desk.db.engine import engine
from front_desk.logging_config import setup_logging
from front_desk.services.repair import (
    CANCELLED_WITHOUT_CREDIT,
    find_cancelled_fully_paid,
    find_cancelled_without_credit,
    find_completed_without_checkout,
    issue_missing_credit,
    reclassify,
    suggest_reclassification,
)
from front_desk.utils.datetime import utc_now

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--apply", action="store_true", help="Write the suggested fixes")
    parser.add_argument("--actor", type=int, default=None, help="Operator ID recorded on fixes")
    parser.add_argument(
        "--only", type=int, action="append", default=None, help="Restrict to booking IDs"
    )
    args = parser.parse_args()

    now = utc_now()
    try:
        with engine.begin() as conn:
            anomalies = (
                find_cancelled_fully_paid(conn)
                + find_completed_without_checkout(conn)
                + find_cancelled_without_credit(conn)
            )
            handled: set[int] = set()
            for anomaly in anomalies:
                booking_id = anomaly["booking_id"]
                if args.only and booking_id not in args.only:
                    continue
                suggestion = suggest_reclassification(anomaly)
                logger.info(
                    "legacy_anomaly",
                    anomaly=anomaly["anomaly"],
                    booking_id=booking_id,
                    status=anomaly["status"],
                    paid=str(anomaly["financials"].paid),
                    payable=str(anomaly["financials"].payable),
                    suggestion=suggestion,
                )
                if not args.apply or booking_id in handled:
                    continue

                if suggestion is not None:
                    reclassify(
                        conn,
                        booking_id,
                        anomaly["status"],
                        suggestion,
                        args.actor,
                        f"{anomaly['anomaly']} -> {suggestion}",
                        now,
                    )
                    handled.add(booking_id)
                elif anomaly["anomaly"] == CANCELLED_WITHOUT_CREDIT:
                    issue_missing_credit(conn, booking_id, args.actor, now)
                    handled.add(booking_id)

            logger.info("legacy_repair_finished", anomalies=len(anomalies), repaired=len(handled))
    except Exception:
        logger.exception("legacy_repair_failed")
        raise


if __name__ == "__main__":
    main()
