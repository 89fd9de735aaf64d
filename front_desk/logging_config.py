from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from front_desk.config import LOG_LEVEL

SERVICE_NAME = "front-desk"

# Library loggers held at WARNING so booking and shift events stay readable
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic.runtime.migration",
    "uvicorn.access",
)

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]


def add_service(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Tag every event with the service name for log aggregation."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: str = LOG_LEVEL) -> None:
    """
    Configure stdlib logging and structlog for the API and the repair scripts.

    DEBUG renders colored console lines with pretty tracebacks. Every other
    level renders one JSON object per event, with exceptions formatted into
    the ``exception`` key so a failed script run (``logger.exception``) still
    produces a single parseable line.

    Args:
        level: Log level name, defaults to LOG_LEVEL from the environment
    """
    level = level.upper()
    debug = level == "DEBUG"

    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=level,
    )
    logging.getLogger().setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if debug:
        processors += [
            structlog.dev.set_exc_info,
            cast(Processor, structlog.dev.ConsoleRenderer(colors=True)),
        ]
    else:
        processors += [
            structlog.processors.format_exc_info,
            cast(Processor, structlog.processors.JSONRenderer()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
