"""Domain exceptions raised by the service layer.

Services raise these instead of HTTP errors; the API layer maps each class to
its status code in a single exception handler.
"""

from __future__ import annotations


class LumoError(RuntimeError):
    """Base class for all domain failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(LumoError):
    """Raised when an operation needs a session and none was supplied."""

    status_code = 401


class ForbiddenError(LumoError):
    """Raised when the caller is known but lacks permission."""

    status_code = 403


class NotFoundError(LumoError):
    """Raised when the targeted entity does not exist."""

    status_code = 404


class ValidationError(LumoError):
    """Raised for rejected input such as empty comments or too many tags."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(LumoError):
    """Raised when a write collides with a unique constraint."""

    status_code = 409


class StorageError(LumoError):
    """Raised when the database fails for reasons unrelated to the request.

    The original exception is chained as ``__cause__`` and only ever logged.
    """

    status_code = 500
