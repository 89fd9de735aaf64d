"""
FastAPI dependency injection providers.

Dependencies can be overridden in tests using app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.engine import Engine

from front_desk.db.engine import engine
from front_desk.services.booking_lifecycle import BookingLifecycle


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: make_engine("sqlite://")
    """
    yield engine


def get_booking_lifecycle(db_engine: Engine = Depends(get_db_engine)) -> BookingLifecycle:
    """
    Provide a BookingLifecycle bound to the request's engine.

    Callers that keep rooms, passenger registration or laundry elsewhere
    override this dependency to inject their collaborators.

    Args:
        db_engine: Engine from get_db_engine

    Returns:
        BookingLifecycle with the default SQL collaborators
    """
    return BookingLifecycle(db_engine)
