"""Typed errors raised by the engagement core.

Services raise these; the application layer maps them onto HTTP responses
with the uniform ``{"success": false, "message": ...}`` envelope.
"""

from __future__ import annotations

from fastapi import status


class InkwellError(Exception):
    """Base class for domain errors carrying a transport status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(InkwellError):
    """Target entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Forbidden(InkwellError):
    """Authenticated principal is not allowed to act on the target."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class InvalidOperation(InkwellError):
    """Request is well-formed but not permitted by domain rules."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid operation"


class Conflict(InkwellError):
    """Storage-level uniqueness violation."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicting state"


__all__ = ["InkwellError", "NotFound", "Forbidden", "InvalidOperation", "Conflict"]
