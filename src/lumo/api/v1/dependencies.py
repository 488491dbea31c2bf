"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lumo.core.errors import UnauthorizedError
from lumo.core.identity import AuthenticatedIdentity, RequestContext
from lumo.core.security import decode_access_token
from lumo.db.session import get_db
from lumo.models import User
from lumo.realtime.broadcaster import RealtimeBroadcaster
from lumo.realtime.server import get_broadcaster
from lumo.services.mailer import InviteMailer, get_mailer

# HTTP Bearer scheme; missing credentials are allowed so public routes can share it
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _resolve_identity(
    credentials: HTTPAuthorizationCredentials | None,
    db: Session,
) -> AuthenticatedIdentity | None:
    if credentials is None:
        return None

    try:
        user_id = decode_access_token(credentials.credentials)
    except UnauthorizedError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return AuthenticatedIdentity.from_user(user)


def get_optional_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
    x_socket_id: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Build the request context for routes that also serve anonymous readers.

    A bearer token, when present, must still be valid.
    """
    return RequestContext(identity=_resolve_identity(credentials, db), socket_id=x_socket_id)


def get_context(
    context: Annotated[RequestContext, Depends(get_optional_context)],
) -> RequestContext:
    """Build the request context for routes that require a signed-in user.

    Raises:
        HTTPException: If no bearer token was supplied.
    """
    if context.identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context


def get_broadcaster_dep() -> RealtimeBroadcaster:
    """Return the shared realtime broadcaster."""
    return get_broadcaster()


def get_mailer_dep() -> InviteMailer:
    """Return the shared invite mailer."""
    return get_mailer()


# Type aliases for context and collaborator dependencies
ContextDep = Annotated[RequestContext, Depends(get_context)]
OptionalContextDep = Annotated[RequestContext, Depends(get_optional_context)]
BroadcasterDep = Annotated[RealtimeBroadcaster, Depends(get_broadcaster_dep)]
MailerDep = Annotated[InviteMailer, Depends(get_mailer_dep)]
