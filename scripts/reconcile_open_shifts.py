"""
Force-close duplicate open shifts, keeping the most recently opened per operator.

Run once before enforcing the one-open-shift index on a database that predates
it (migration 0002 does the same automatically).

Usage:
    python scripts/reconcile_open_shifts.py            # report only
    python scripts/reconcile_open_shifts.py --apply    # close duplicates
"""

import argparse

import structlog

from front_desk.db.engine import engine
from front_desk.db.readers.shifts import list_open_shifts, operators_with_duplicate_open_shifts
from front_desk.logging_config import setup_logging
from front_desk.services.shift_ledger import reconcile_duplicates
from front_desk.utils.datetime import utc_now

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--apply", action="store_true", help="Close duplicates (default: report only)")
    args = parser.parse_args()

    now = utc_now()
    try:
        with engine.begin() as conn:
            operators = operators_with_duplicate_open_shifts(conn)
            if not operators:
                logger.info("no_duplicate_open_shifts")
                return

            for operator_id in operators:
                shifts = list_open_shifts(conn, operator_id)
                logger.info(
                    "duplicate_open_shifts_found",
                    operator_id=operator_id,
                    keep=shifts[0].id,
                    close=[s.id for s in shifts[1:]],
                )
                if args.apply:
                    reconcile_duplicates(conn, operator_id, now)
    except Exception:
        logger.exception("shift_reconciliation_failed")
        raise


if __name__ == "__main__":
    main()
