import asyncio

from starlette import status
from starlette.websockets import WebSocket, WebSocketDisconnect

from sup_notifier.constants import WS_REPLACED_CLOSE_CODE, WS_REPLACED_CLOSE_REASON
from sup_notifier.logging import logger
from sup_notifier.managers.connection_registry import ConnectionRegistry
from sup_notifier.managers.dispatcher import NotificationDispatcher
from sup_notifier.managers.liveness_monitor import LivenessMonitor
from sup_notifier.schemas.notification import Notification
from sup_notifier.settings import app_settings
from sup_notifier.utils.metrics import ws_registrations_total


class NotificationServer:
    """
    Real-time notification core.

    Owns the connection registry, the liveness monitor and the dispatcher.
    One instance is created per application at startup and handed to the
    WebSocket endpoint and HTTP handlers through `app.state`; request
    handlers call `send_notification` and `broadcast_notification` whenever
    a domain event occurs (friend request sent/accepted, sup request
    created/accepted).
    """

    def __init__(
        self,
        heartbeat_interval: float | None = None,
        close_timeout: float | None = None,
    ) -> None:
        self.registry = ConnectionRegistry()
        self.monitor = LivenessMonitor(
            heartbeat_interval
            if heartbeat_interval is not None
            else app_settings.HEARTBEAT_INTERVAL_SECONDS,
            on_stale=self.prune_stale,
        )
        self.dispatcher = NotificationDispatcher(self.registry)
        self.close_timeout = (
            close_timeout
            if close_timeout is not None
            else app_settings.WS_CLOSE_TIMEOUT_SECONDS
        )

    def connect(self, websocket: WebSocket) -> None:
        """
        Tracks a newly accepted connection.

        The connection is liveness-checked from now on but stays
        unaddressable until it registers.
        """
        self.monitor.watch(websocket)

    async def register(self, user_id: int, websocket: WebSocket) -> None:
        """
        Makes a connection addressable under `user_id`.

        A different connection previously registered for the same user is
        closed with code 4000 so it does not linger unaddressable.

        Args:
            user_id: Trusted user identity supplied by the client.
            websocket: The connection that sent the registration message.
        """
        superseded = self.registry.register(user_id, websocket)
        logger.info(f"Client registered: {user_id}")

        if superseded is None:
            ws_registrations_total.labels(outcome="registered").inc()
            return

        ws_registrations_total.labels(outcome="replaced").inc()
        logger.info(
            f"Closing superseded connection {id(superseded)} of user {user_id}"
        )
        await self._close(
            superseded, WS_REPLACED_CLOSE_CODE, WS_REPLACED_CLOSE_REASON
        )

    def disconnect(self, websocket: WebSocket) -> list[int]:
        """
        Forgets a closed connection.

        Removes all of its bindings and cancels its liveness check. Safe to call
        for connections that never registered.

        Returns:
            The user ids that were bound to the connection.
        """
        self.monitor.unwatch(websocket)
        user_ids = self.registry.unregister(websocket)
        for user_id in user_ids:
            logger.info(f"Client disconnected: {user_id}")
        return user_ids

    async def prune_stale(self, websocket: WebSocket) -> None:
        """
        Drops the bindings of a connection the liveness monitor found closed.

        The connection's receive loop may still be pending; its eventual
        disconnect is then a no-op.
        """
        for user_id in self.registry.unregister(websocket):
            logger.info(f"Pruned stale connection of user {user_id}")

    def lookup(self, user_id: int) -> WebSocket | None:
        return self.registry.lookup(user_id)

    def is_online(self, user_id: int) -> bool:
        return user_id in self.registry

    async def send_notification(
        self, user_id: int, notification: Notification
    ) -> bool:
        """
        Best-effort delivery of a notification to one user.

        Never raises for offline users or failed writes; see
        `NotificationDispatcher.send_to`.
        """
        return await self.dispatcher.send_to(user_id, notification)

    async def broadcast_notification(self, notification: Notification) -> int:
        """
        Best-effort delivery of a notification to every registered user.

        See `NotificationDispatcher.broadcast`.
        """
        return await self.dispatcher.broadcast(notification)

    async def shutdown(self) -> None:
        """
        Stops liveness checks, closes every open connection, registered or
        not, and clears the registry.
        """
        connections = {
            id(ws): ws for ws in self.monitor.watched() + self.registry.all()
        }
        await self.monitor.shutdown()

        if connections:
            logger.info(f"Closing {len(connections)} open connections")
            await asyncio.gather(
                *[
                    self._close(
                        ws, status.WS_1001_GOING_AWAY, "Server shutting down"
                    )
                    for ws in connections.values()
                ],
                return_exceptions=True,
            )

        self.registry.clear()

    async def _close(self, websocket: WebSocket, code: int, reason: str) -> None:
        try:
            await asyncio.wait_for(
                websocket.close(code=code, reason=reason),
                timeout=self.close_timeout,
            )
        except (
            RuntimeError,
            WebSocketDisconnect,
            OSError,
            asyncio.TimeoutError,
        ) as ex:
            # RuntimeError: WebSocket already closed
            # WebSocketDisconnect: transport gone (half-open peer)
            logger.debug(
                f"Could not close websocket object ({id(websocket)}): {ex}"
            )
