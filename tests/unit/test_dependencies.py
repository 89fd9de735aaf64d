"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from front_desk.dependencies import get_booking_lifecycle, get_db_engine
from front_desk.services.booking_lifecycle import BookingLifecycle
from front_desk.services.collaborators import SqlLaundryQueue, SqlPassengerRegistry, SqlRoomAvailability


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Test that multiple calls get the same engine instance."""
    assert next(get_db_engine()) is next(get_db_engine())


@pytest.mark.unit
def test_get_booking_lifecycle_uses_sql_collaborators() -> None:
    """Test the default lifecycle wiring."""
    mock_engine = Mock(spec=Engine)

    lifecycle = get_booking_lifecycle(mock_engine)

    assert isinstance(lifecycle, BookingLifecycle)
    assert lifecycle.engine is mock_engine
    assert isinstance(lifecycle.rooms, SqlRoomAvailability)
    assert isinstance(lifecycle.passengers, SqlPassengerRegistry)
    assert isinstance(lifecycle.laundry, SqlLaundryQueue)


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    """Test that the engine dependency can be overridden for testing."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(lifecycle: BookingLifecycle = Depends(get_booking_lifecycle)) -> dict[str, str]:
        """Test endpoint."""
        return {"engine_name": lifecycle.engine.name}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"
    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    client = TestClient(app)
    response = client.get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine"}
