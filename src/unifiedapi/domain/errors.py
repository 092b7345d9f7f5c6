"""RSVP error taxonomy.

Every RsvpError is rendered to the caller as {"ok": false, "message": ...}
with its status_code. StoreError never reaches a caller directly: the gate
service converts it into InternalError.
"""

from __future__ import annotations

from typing import Any


class RsvpError(Exception):
    """Base class for errors reported to RSVP callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RsvpError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(RsvpError):
    """No guest matches the request."""

    status_code = 404


class InternalError(RsvpError):
    """Store or connectivity failure.

    debug holds raw driver detail; it is only rendered outside production.
    """

    status_code = 500

    def __init__(self, message: str, debug: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.debug = debug


class StoreError(Exception):
    """A query or connection failed inside the guest directory store."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause

    def diagnostics(self) -> dict[str, Any]:
        """Raw driver detail (message, SQLSTATE code, detail) for non-production callers."""
        diag = getattr(self.cause, "diag", None)
        return {
            "message": str(self.cause).strip(),
            "code": getattr(self.cause, "pgcode", None),
            "detail": getattr(diag, "message_detail", None) if diag is not None else None,
        }
