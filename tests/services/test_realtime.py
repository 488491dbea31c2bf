# mypy: ignore-errors
"""Tests for the Socket.IO gateway and broadcaster."""

import pytest

from lumo.core.security import create_access_token
from lumo.realtime.broadcaster import SocketIOBroadcaster, post_room, user_room
from lumo.realtime.server import RealtimeGateway
from lumo.utils.tasks import drain_background_tasks


@pytest.fixture()
def sio(mocker):
    server = mocker.MagicMock()
    server.save_session = mocker.AsyncMock()
    server.get_session = mocker.AsyncMock()
    server.enter_room = mocker.AsyncMock()
    server.leave_room = mocker.AsyncMock()
    server.emit = mocker.AsyncMock()
    return server


@pytest.fixture()
def gateway(sio, session_factory):
    return RealtimeGateway(sio, session_factory=session_factory)


def test_register_binds_client_events(gateway, sio) -> None:
    gateway.register()
    events = {call.args[0] for call in sio.on.call_args_list}
    assert events == {"connect", "disconnect", "join-user", "join-post", "leave-post"}


@pytest.mark.asyncio
async def test_connect_with_valid_token_saves_session(gateway, sio, author) -> None:
    accepted = await gateway.on_connect("sid-1", {}, {"token": create_access_token(author.id)})

    assert accepted is True
    sio.save_session.assert_awaited_once_with("sid-1", {"user_id": author.id, "username": "alice"})


@pytest.mark.asyncio
@pytest.mark.parametrize("auth", [None, {}, {"token": "garbage"}, "not-a-dict"])
async def test_connect_refused_without_valid_token(gateway, sio, auth) -> None:
    assert await gateway.on_connect("sid-1", {}, auth) is False
    sio.save_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_connect_refused_for_unknown_user(gateway, sio) -> None:
    assert await gateway.on_connect("sid-1", {}, {"token": create_access_token(424242)}) is False


@pytest.mark.asyncio
async def test_join_user_only_own_room(gateway, sio, author, editor) -> None:
    sio.get_session.return_value = {"user_id": author.id, "username": "alice"}

    assert await gateway.on_join_user("sid-1", author.id) == {"ok": True}
    sio.enter_room.assert_awaited_once_with("sid-1", user_room(author.id))

    sio.enter_room.reset_mock()
    result = await gateway.on_join_user("sid-1", {"user_id": editor.id})
    assert result["ok"] is False
    sio.enter_room.assert_not_awaited()


@pytest.mark.asyncio
async def test_join_post_checks_read_access(gateway, sio, editor, outsider, draft, grant) -> None:
    grant(draft, editor, "view")

    sio.get_session.return_value = {"user_id": editor.id, "username": "bob"}
    assert await gateway.on_join_post("sid-1", draft.id) == {"ok": True}
    sio.enter_room.assert_awaited_once_with("sid-1", post_room(draft.id))

    sio.enter_room.reset_mock()
    sio.get_session.return_value = {"user_id": outsider.id, "username": "dave"}
    assert (await gateway.on_join_post("sid-2", {"post_id": draft.id}))["error"] == "forbidden"
    assert (await gateway.on_join_post("sid-2", "missing"))["error"] == "not found"
    sio.enter_room.assert_not_awaited()


@pytest.mark.asyncio
async def test_leave_post(gateway, sio) -> None:
    assert await gateway.on_leave_post("sid-1", "abc") == {"ok": True}
    sio.leave_room.assert_awaited_once_with("sid-1", "post-abc")
    assert (await gateway.on_leave_post("sid-1", None))["ok"] is False


@pytest.mark.asyncio
async def test_broadcaster_emits_to_rooms(sio) -> None:
    broadcaster = SocketIOBroadcaster(sio)

    broadcaster.emit_to_user(7, "new-notification", {"id": 1})
    broadcaster.emit_to_post("p1", "post-updated", {"post_id": "p1"}, skip_sid="sid-1")
    await drain_background_tasks()

    sio.emit.assert_any_await("new-notification", {"id": 1}, to="user-7")
    sio.emit.assert_any_await("post-updated", {"post_id": "p1"}, to="post-p1", skip_sid="sid-1")


@pytest.mark.asyncio
async def test_broadcaster_swallows_emit_failures(sio, caplog) -> None:
    sio.emit.side_effect = ConnectionError("gone")
    broadcaster = SocketIOBroadcaster(sio)

    broadcaster.emit_to_user(7, "new-notification", {})
    await drain_background_tasks()

    assert "Background task new-notification -> user-7 failed" in caplog.text
