"""
Tests for the notification WebSocket consumer.

This module tests inbound message handling and the connection lifecycle of
the Notifications endpoint without a running server.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from starlette import status
from starlette.websockets import WebSocketDisconnect

from sup_notifier.api.ws.consumers.notifications import Notifications
from sup_notifier.managers.notification_server import NotificationServer
from tests.mocks.websocket_mocks import (
    create_mock_notification_server,
    create_mock_websocket,
)


def make_consumer(server=None, receive=None, send=None):
    """Build a Notifications endpoint bound to `server`."""
    scope = {
        "type": "websocket",
        "path": "/ws/notifications",
        "headers": [],
        "app": SimpleNamespace(state=SimpleNamespace(notification_server=server)),
    }
    consumer = Notifications(scope=scope, receive=receive, send=send)
    consumer.notification_server = server
    return consumer


def make_receive(*messages):
    """ASGI receive callable replaying `messages` in order."""
    queue = list(messages)

    async def receive():
        return queue.pop(0)

    return receive


class TestOnReceive:
    """Tests for Notifications.on_receive."""

    @pytest.mark.asyncio
    async def test_register_message(self):
        """Test a registration message registers the connection."""
        server = create_mock_notification_server()
        consumer = make_consumer(server)
        websocket = create_mock_websocket()

        await consumer.on_receive(
            websocket, json.dumps({"type": "register", "userId": 7})
        )

        server.register.assert_awaited_once_with(7, websocket)

    @pytest.mark.asyncio
    async def test_malformed_json_message(self):
        """Test invalid JSON is ignored and the connection stays open."""
        server = create_mock_notification_server()
        consumer = make_consumer(server)
        websocket = create_mock_websocket()

        await consumer.on_receive(websocket, "{not json")

        server.register.assert_not_awaited()
        websocket.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_without_user_id(self):
        """Test a registration missing userId leaves the registry unchanged."""
        server = NotificationServer(heartbeat_interval=60)
        consumer = make_consumer(server)
        websocket = create_mock_websocket()

        await consumer.on_receive(websocket, '{"type": "register"}')

        assert len(server.registry) == 0
        websocket.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_message_type_is_ignored(self):
        """Test non-registration messages cause no state change."""
        server = create_mock_notification_server()
        consumer = make_consumer(server)
        websocket = create_mock_websocket()

        await consumer.on_receive(websocket, '{"type": "ack"}')

        server.register.assert_not_awaited()
        server.disconnect.assert_not_called()
        websocket.close.assert_not_awaited()


class TestLifecycle:
    """Tests for connection, disconnect and error handling."""

    @pytest.mark.asyncio
    async def test_on_connect_accepts_and_tracks(self):
        """Test a new connection is accepted and watched."""
        server = create_mock_notification_server()
        consumer = make_consumer()
        websocket = create_mock_websocket()
        websocket.app.state.notification_server = server

        await consumer.on_connect(websocket)

        websocket.accept.assert_awaited_once()
        server.connect.assert_called_once_with(websocket)
        assert consumer.notification_server is server

    @pytest.mark.asyncio
    async def test_on_disconnect_forgets_connection(self):
        """Test closing a connection removes it from the server."""
        server = create_mock_notification_server()
        consumer = make_consumer(server)
        websocket = create_mock_websocket()

        await consumer.on_disconnect(websocket, status.WS_1000_NORMAL_CLOSURE)

        server.disconnect.assert_called_once_with(websocket)

    @pytest.mark.asyncio
    async def test_dispatch_register_then_close(self):
        """Test a full session registers and then cleans up on close."""
        server = NotificationServer(heartbeat_interval=60)
        send = AsyncMock()
        consumer = make_consumer(
            server,
            receive=make_receive(
                {"type": "websocket.connect"},
                {
                    "type": "websocket.receive",
                    "text": '{"type":"register","userId":7}',
                },
                {"type": "websocket.disconnect", "code": 1001},
            ),
            send=send,
        )

        await consumer.dispatch()

        sent_types = [call.args[0]["type"] for call in send.await_args_list]
        assert sent_types == ["websocket.accept"]
        assert server.lookup(7) is None
        assert len(server.monitor) == 0

    @pytest.mark.asyncio
    async def test_dispatch_error_terminates_connection(self):
        """Test an error closes the transport with 1011 and cleans up."""
        server = NotificationServer(heartbeat_interval=60)
        send = AsyncMock()
        consumer = make_consumer(
            server,
            receive=make_receive(
                {"type": "websocket.connect"},
                {
                    "type": "websocket.receive",
                    "text": '{"type":"register","userId":7}',
                },
                {"type": "websocket.receive", "text": "boom"},
            ),
            send=send,
        )
        original_on_receive = consumer.on_receive

        async def failing_on_receive(websocket, data):
            if data == "boom":
                raise RuntimeError("handler crashed")
            await original_on_receive(websocket, data)

        consumer.on_receive = failing_on_receive

        with pytest.raises(RuntimeError, match="handler crashed"):
            await consumer.dispatch()

        close_messages = [
            call.args[0]
            for call in send.await_args_list
            if call.args[0]["type"] == "websocket.close"
        ]
        assert close_messages == [
            {
                "type": "websocket.close",
                "code": status.WS_1011_INTERNAL_ERROR,
                "reason": "",
            }
        ]
        assert server.lookup(7) is None
        assert len(server.monitor) == 0

    @pytest.mark.asyncio
    async def test_dispatch_error_on_dead_transport_keeps_original_error(self):
        """Test a failing close does not mask the error that ended the session."""
        server = NotificationServer(heartbeat_interval=60)

        async def send(message):
            if message["type"] == "websocket.close":
                raise WebSocketDisconnect(code=1006)

        consumer = make_consumer(
            server,
            receive=make_receive(
                {"type": "websocket.connect"},
                {"type": "websocket.receive", "text": "boom"},
            ),
            send=send,
        )

        async def failing_on_receive(websocket, data):
            raise RuntimeError("handler crashed")

        consumer.on_receive = failing_on_receive

        with pytest.raises(RuntimeError, match="handler crashed"):
            await consumer.dispatch()

        assert len(server.monitor) == 0
