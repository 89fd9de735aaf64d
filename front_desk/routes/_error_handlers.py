"""
Translate the domain error taxonomy into HTTP responses.

Booking and shift controllers live outside this service; whatever routes are
mounted on the app get a consistent JSON error body:

    {"error": {"kind": "PreconditionsNotMet", "message": "...", "pending_steps": [...]}}
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from front_desk.errors import (
    ConflictError,
    FrontDeskError,
    InvalidStateTransition,
    NotFoundError,
    PreconditionsNotMet,
    ValidationError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: dict[type[FrontDeskError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidStateTransition: status.HTTP_409_CONFLICT,
    PreconditionsNotMet: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


def status_for(exc: FrontDeskError) -> int:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def handle_front_desk_error(request: Request, exc: FrontDeskError) -> JSONResponse:
    """
    Render a domain error as JSON with its mapped status code.

    Args:
        request: Request that raised
        exc: FrontDeskError raised by a handler

    Returns:
        JSONResponse with {"error": exc.to_dict()}
    """
    code = status_for(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        kind=exc.kind,
        status_code=code,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=code, content={"error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FrontDeskError, handle_front_desk_error)  # type: ignore[arg-type]
