"""
Error taxonomy shared by every front desk component.

Each error carries a stable ``kind`` so callers (HTTP handlers, scripts, the
booking lifecycle result object) can react to the category of failure without
parsing messages. Staff-facing messages always name the specific condition
that blocked the operation.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class FrontDeskError(Exception):
    """Base class for all domain errors."""

    kind = "FrontDeskError"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the error for structured results and HTTP responses.

        Returns:
            Dict with "kind", "message" and any extra details
        """
        return {"kind": self.kind, "message": self.message, **self.details}


class ValidationError(FrontDeskError):
    """Bad input shape or values (malformed dates, non-positive amounts)."""

    kind = "ValidationError"


class InvalidStateTransition(FrontDeskError):
    """The attempted status is not reachable from the current one."""

    kind = "InvalidStateTransition"

    def __init__(self, current: str, attempted: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Cannot move from '{current}' to '{attempted}'",
            current=current,
            attempted=attempted,
        )
        self.current = current
        self.attempted = attempted


class PreconditionsNotMet(FrontDeskError):
    """The transition is valid but readiness gates are still open."""

    kind = "PreconditionsNotMet"

    def __init__(self, pending_steps: Sequence[str], message: Optional[str] = None) -> None:
        steps = list(pending_steps)
        super().__init__(
            message or "Pending steps: " + ", ".join(steps),
            pending_steps=steps,
        )
        self.pending_steps = steps


class ConflictError(FrontDeskError):
    """Uniqueness or concurrency violation; re-fetch and decide."""

    kind = "ConflictError"

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        super().__init__(message or code, code=code)
        self.code = code


class NotFoundError(FrontDeskError):
    """Referenced booking, shift, payment or usage row does not exist."""

    kind = "NotFoundError"

    def __init__(self, entity: str, identifier: Any) -> None:
        super().__init__(f"{entity} {identifier} not found", entity=entity, id=identifier)
        self.entity = entity
        self.identifier = identifier
