import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from starlette.websockets import WebSocketDisconnect

from teamboard.services.websocket_manager import WebSocketManager, websocket_manager


def make_socket():
    websocket = AsyncMock()
    websocket.sent = []
    websocket.send_text.side_effect = lambda text: websocket.sent.append(json.loads(text))
    return websocket


def test_connect_sends_greeting():
    manager = WebSocketManager()
    websocket = make_socket()

    asyncio.run(manager.connect(websocket, 1))

    assert manager.get_connected_users() == [1]
    assert websocket.sent[0]["type"] == "connection"


def test_publish_reaches_only_listed_users():
    manager = WebSocketManager()
    member, outsider = make_socket(), make_socket()

    async def scenario():
        await manager.connect(member, 1)
        await manager.connect(outsider, 2)
        await manager.publish_invalidation([1, 3], "tasks", 10, task_id=5)

    asyncio.run(scenario())

    event = member.sent[-1]
    assert event["type"] == "invalidate"
    assert event["resource"] == "tasks"
    assert event["project_id"] == 10
    assert event["task_id"] == 5
    assert [m["type"] for m in outsider.sent] == ["connection"]


def test_broken_socket_is_dropped():
    manager = WebSocketManager()
    healthy, broken = make_socket(), make_socket()

    async def scenario():
        await manager.connect(healthy, 1)
        await manager.connect(broken, 1)
        broken.send_text.side_effect = RuntimeError("closed")
        await manager.publish_invalidation([1], "project", 10)

    asyncio.run(scenario())

    assert manager.get_connection_count(1) == 1
    assert healthy.sent[-1]["type"] == "invalidate"


def test_disconnect_removes_user():
    manager = WebSocketManager()
    websocket = make_socket()
    asyncio.run(manager.connect(websocket, 1))

    manager.disconnect(websocket, 1)
    assert manager.get_connected_users() == []


class TestRefreshEndpoint:

    @pytest.fixture(autouse=True)
    def clean_manager(self):
        yield
        websocket_manager.active_connections.clear()

    def test_rejects_missing_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws"):
                pass

    def test_rejects_bad_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws?token=garbage"):
                pass

    def test_authenticated_user_connects(self, client, alice):
        headers, alice_id, _ = alice
        token = headers["Authorization"].split(" ", 1)[1]

        with client.websocket_connect(f"/ws?token={token}") as ws:
            assert ws.receive_json()["type"] == "connection"
            assert websocket_manager.get_connected_users() == [alice_id]
