"""Realtime event fan-out to user rooms and post rooms."""

from __future__ import annotations

from typing import Any, Protocol

import socketio

from lumo.utils.tasks import fire_and_forget

# Server -> client events
EVENT_NEW_NOTIFICATION = "new-notification"
EVENT_NEW_COMMENT = "new-comment"
EVENT_POST_UPDATED = "post-updated"

# Client -> server events
EVENT_JOIN_USER = "join-user"
EVENT_JOIN_POST = "join-post"
EVENT_LEAVE_POST = "leave-post"


def user_room(user_id: int) -> str:
    """Return the personal room name for a user."""
    return f"user-{user_id}"


def post_room(post_id: str) -> str:
    """Return the room name shared by everyone viewing a post."""
    return f"post-{post_id}"


class RealtimeBroadcaster(Protocol):
    """Capability handed to services for pushing live events.

    Implementations must not raise and must not block the caller; delivery is
    best effort.
    """

    def emit_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> None:
        """Send an event to every socket in the user's personal room."""

    def emit_to_post(
        self,
        post_id: str,
        event: str,
        payload: dict[str, Any],
        *,
        skip_sid: str | None = None,
    ) -> None:
        """Send an event to every socket viewing a post, except ``skip_sid``."""


class SocketIOBroadcaster:
    """Broadcaster backed by a python-socketio ``AsyncServer``."""

    def __init__(self, server: socketio.AsyncServer) -> None:
        self._server = server

    def emit_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> None:
        room = user_room(user_id)
        fire_and_forget(
            self._server.emit(event, payload, to=room),
            label=f"{event} -> {room}",
        )

    def emit_to_post(
        self,
        post_id: str,
        event: str,
        payload: dict[str, Any],
        *,
        skip_sid: str | None = None,
    ) -> None:
        room = post_room(post_id)
        fire_and_forget(
            self._server.emit(event, payload, to=room, skip_sid=skip_sid),
            label=f"{event} -> {room}",
        )

