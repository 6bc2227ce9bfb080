import uuid
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from sup_notifier.logging import clear_log_context, logger, set_log_context
from sup_notifier.managers.notification_server import NotificationServer
from sup_notifier.utils.metrics import ws_connections_active, ws_connections_total


class NotificationWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bound to the application's `NotificationServer`.

    Each connection gets its own endpoint instance that owns the receive
    loop, tracks the connection with the notification server while it is
    open and forgets it on close or error.
    """

    encoding = None  # Accept both text and binary frames

    async def dispatch(self) -> None:
        """
        Runs the connection lifecycle.

        1. Calls on_connect, which accepts the connection and starts its
           liveness check.
        2. Receives frames until the client disconnects, passing each one to
           on_receive.
        3. On an unexpected error, force-closes the transport with 1011 so
           no half-open socket is left behind, then re-raises.
        4. Always calls on_disconnect, which unregisters the connection and
           cancels its liveness check.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        await self.on_connect(websocket)

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            ws_connections_total.labels(status="errored").inc()
            logger.error(f"WebSocket error: {exc}")
            await self.terminate(websocket)
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Extract the raw frame payload without interpreting it.

        Malformed payloads must not close the connection, so parsing is left
        to on_receive.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def terminate(self, websocket: WebSocket) -> None:
        """Force-close the transport after an error."""
        if websocket.application_state == WebSocketState.DISCONNECTED:
            return

        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        except (RuntimeError, WebSocketDisconnect) as ex:
            # Keep the original error; the transport may already be gone
            logger.debug(f"WebSocket already closed: {ex!r}")

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accepts the connection and starts its liveness check.

        The connection stays unaddressable until the client registers.
        """
        await websocket.accept()

        self.notification_server: NotificationServer = (
            websocket.app.state.notification_server
        )
        self.connection_id = str(uuid.uuid4())
        set_log_context(connection_id=self.connection_id[:8])

        self.notification_server.connect(websocket)
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.info("New WebSocket connection established")

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Removes the connection's bindings and cancels its liveness check.
        """
        user_ids = self.notification_server.disconnect(websocket)
        ws_connections_total.labels(status="closed").inc()
        ws_connections_active.dec()

        logger.debug(
            f"Client {user_ids or 'unregistered'} disconnected with code {close_code}"
        )
        clear_log_context()
