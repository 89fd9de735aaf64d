"""
Unit tests for the domain error to HTTP response mapping.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from front_desk.errors import (
    ConflictError,
    FrontDeskError,
    InvalidStateTransition,
    NotFoundError,
    PreconditionsNotMet,
    ValidationError,
)
from front_desk.middleware import RequestIDMiddleware
from front_desk.routes._error_handlers import register_error_handlers, status_for

ERRORS: dict[str, FrontDeskError] = {
    "validation": ValidationError("Check-out date must be after check-in date"),
    "transition": InvalidStateTransition("completed", "checked-in"),
    "preconditions": PreconditionsNotMet(["register passengers"]),
    "conflict": ConflictError("OPEN_SHIFT_EXISTS", "Operator 3 already has open shift 9"),
    "missing": NotFoundError("Booking", 42),
}


@pytest.fixture
def client() -> TestClient:
    """App with one route per error kind."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/fail/{name}")
    def fail(name: str) -> None:
        """Raise the named domain error."""
        raise ERRORS[name]

    return TestClient(app)


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, status_code",
    [
        ("validation", 422),
        ("transition", 409),
        ("preconditions", 409),
        ("conflict", 409),
        ("missing", 404),
    ],
)
def test_domain_errors_map_to_status_codes(client: TestClient, name: str, status_code: int) -> None:
    """Test the status code for each error kind."""
    response = client.get(f"/fail/{name}")

    assert response.status_code == status_code
    assert response.json()["error"]["kind"] == ERRORS[name].kind


@pytest.mark.unit
def test_preconditions_body_lists_pending_steps(client: TestClient) -> None:
    """Test that staff see exactly which steps blocked the request."""
    body = client.get("/fail/preconditions").json()

    assert body["error"]["pending_steps"] == ["register passengers"]


@pytest.mark.unit
def test_error_responses_keep_request_id(client: TestClient) -> None:
    """Test that failed responses still carry X-Request-ID."""
    response = client.get("/fail/conflict", headers={"X-Request-ID": "abc"})

    assert response.headers["X-Request-ID"] == "abc"
    assert response.json()["error"]["code"] == "OPEN_SHIFT_EXISTS"


@pytest.mark.unit
def test_unmapped_domain_error_is_bad_request() -> None:
    """Test the fallback status for the base error class."""
    assert status_for(FrontDeskError("unexpected")) == 400
