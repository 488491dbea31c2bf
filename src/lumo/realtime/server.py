"""Socket.IO server for live notifications and post rooms.

Clients authenticate on connect with the same bearer token the REST API
uses, then join their personal room and the rooms of posts they open.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import socketio
from sqlalchemy.orm import Session

from lumo.core.errors import UnauthorizedError
from lumo.core.security import decode_access_token
from lumo.core.settings import settings
from lumo.db.session import SessionLocal
from lumo.models import Post, User
from lumo.realtime.broadcaster import (
    EVENT_JOIN_POST,
    EVENT_JOIN_USER,
    EVENT_LEAVE_POST,
    SocketIOBroadcaster,
    post_room,
    user_room,
)
from lumo.services.access import can_read, resolve_permission

logger = logging.getLogger(__name__)


def _extract_id(data: Any, key: str) -> str | None:
    """Accept either a bare id or an object carrying it under ``key``."""
    if isinstance(data, dict):
        data = data.get(key)
    if data is None or isinstance(data, bool):
        return None
    value = str(data).strip()
    return value or None


class RealtimeGateway:
    """Socket.IO event handlers bound to an ``AsyncServer``."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self.sio = sio
        self._session_factory = session_factory

    def register(self) -> None:
        """Attach the handlers to the server."""
        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        self.sio.on(EVENT_JOIN_USER, self.on_join_user)
        self.sio.on(EVENT_JOIN_POST, self.on_join_post)
        self.sio.on(EVENT_LEAVE_POST, self.on_leave_post)

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any = None) -> bool:
        token = auth.get("token") if isinstance(auth, dict) else None
        if not token:
            logger.warning("Socket %s rejected: no token", sid)
            return False

        try:
            user_id = decode_access_token(token)
        except UnauthorizedError:
            logger.warning("Socket %s rejected: invalid token", sid)
            return False

        with self._session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                logger.warning("Socket %s rejected: unknown user %s", sid, user_id)
                return False
            username = user.username

        await self.sio.save_session(sid, {"user_id": user_id, "username": username})
        logger.info("Socket %s connected for user %s", sid, user_id)
        return True

    async def on_disconnect(self, sid: str, *args: Any) -> None:
        logger.debug("Socket %s disconnected", sid)

    async def on_join_user(self, sid: str, data: Any = None) -> dict[str, Any]:
        """Join the caller's personal room; other users' rooms are refused."""
        session = await self.sio.get_session(sid)
        user_id = session["user_id"]
        requested = _extract_id(data, "user_id")
        if requested is not None and requested != str(user_id):
            logger.warning("Socket %s (user %s) refused room of user %s", sid, user_id, requested)
            return {"ok": False, "error": "forbidden"}

        await self.sio.enter_room(sid, user_room(user_id))
        return {"ok": True}

    async def on_join_post(self, sid: str, data: Any = None) -> dict[str, Any]:
        """Join a post's room if the caller can read the post."""
        post_id = _extract_id(data, "post_id")
        if post_id is None:
            return {"ok": False, "error": "post_id is required"}

        session = await self.sio.get_session(sid)
        user_id = session["user_id"]
        with self._session_factory() as db:
            post = db.get(Post, post_id)
            if post is None:
                return {"ok": False, "error": "not found"}
            allowed = can_read(post, resolve_permission(db, post, user_id))

        if not allowed:
            logger.warning("Socket %s (user %s) refused room of post %s", sid, user_id, post_id)
            return {"ok": False, "error": "forbidden"}

        await self.sio.enter_room(sid, post_room(post_id))
        return {"ok": True}

    async def on_leave_post(self, sid: str, data: Any = None) -> dict[str, Any]:
        post_id = _extract_id(data, "post_id")
        if post_id is None:
            return {"ok": False, "error": "post_id is required"}
        await self.sio.leave_room(sid, post_room(post_id))
        return {"ok": True}


def _cors_allowed_origins() -> str | list[str]:
    if "*" in settings.cors_origins:
        return "*"
    return list(settings.cors_origins)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=_cors_allowed_origins(),
    logger=False,
    engineio_logger=False,
)
gateway = RealtimeGateway(sio)
gateway.register()


class _BroadcasterSingleton:
    """Singleton wrapper for the Socket.IO broadcaster."""

    _instance: SocketIOBroadcaster | None = None

    @classmethod
    def get_instance(cls) -> SocketIOBroadcaster:
        """Get or create the singleton broadcaster bound to ``sio``."""
        if cls._instance is None:
            cls._instance = SocketIOBroadcaster(sio)
        return cls._instance


def get_broadcaster() -> SocketIOBroadcaster:
    """Return a singleton broadcaster instance."""
    return _BroadcasterSingleton.get_instance()
