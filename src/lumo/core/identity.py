"""Caller identity carried through every service call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lumo.core.errors import UnauthorizedError

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from lumo.models.user import User


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """A user already authenticated by the session provider."""

    id: int
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> AuthenticatedIdentity:
        """Build an identity from a persisted user row."""
        return cls(id=user.id, username=user.username, email=user.email)


@dataclass(frozen=True)
class RequestContext:
    """Per-request context handed to services.

    Attributes:
        identity: The authenticated caller, or None for anonymous requests.
        socket_id: Realtime session id of the caller's browser tab, if the
            client supplied one. Post-room broadcasts skip this socket so the
            originating tab does not receive its own echo.
    """

    identity: AuthenticatedIdentity | None = None
    socket_id: str | None = None

    @property
    def user_id(self) -> int | None:
        """Return the caller's user id or None when anonymous."""
        return self.identity.id if self.identity else None

    def require_identity(self) -> AuthenticatedIdentity:
        """Return the identity or raise UnauthorizedError."""
        if self.identity is None:
            raise UnauthorizedError("Unauthorized")
        return self.identity
