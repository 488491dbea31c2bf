"""Realtime delivery over Socket.IO."""

from .broadcaster import (
    RealtimeBroadcaster,
    SocketIOBroadcaster,
    post_room,
    user_room,
)
from .server import RealtimeGateway, get_broadcaster, sio

__all__ = [
    "RealtimeBroadcaster",
    "RealtimeGateway",
    "SocketIOBroadcaster",
    "get_broadcaster",
    "post_room",
    "sio",
    "user_room",
]
