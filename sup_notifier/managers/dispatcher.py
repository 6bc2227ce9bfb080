import asyncio
import json

from starlette.websockets import WebSocket, WebSocketDisconnect

from sup_notifier.logging import logger
from sup_notifier.managers.connection_registry import ConnectionRegistry
from sup_notifier.schemas.notification import Notification
from sup_notifier.utils.metrics import (
    notification_send_failures_total,
    notifications_sent_total,
)


def serialize_notification(notification: Notification) -> str:
    """
    Encode a notification as one JSON text frame.

    Args:
        notification: The notification to encode.

    Returns:
        str: Compact JSON object with `type`, `message` and optional `data`.
    """
    return json.dumps(
        notification.to_wire(), separators=(",", ":"), ensure_ascii=False
    )


class NotificationDispatcher:
    """
    Routes notifications to registered connections.

    Delivery is best effort: notifications are not queued, retried or
    acknowledged, and a recipient that is not registered is silently skipped.
    The dispatcher only reads the registry. Connections whose writes fail are
    cleaned up by their own disconnect handling or by the liveness monitor.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def _safe_send(
        self, user_id: int, websocket: WebSocket, text: str, mode: str
    ) -> bool:
        try:
            await websocket.send_text(text)
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            notification_send_failures_total.labels(mode=mode).inc()
            logger.warning(
                f"Failed to send to connection {id(websocket)} "
                f"(user: {user_id}): {e}"
            )
            return False
        except Exception as e:
            notification_send_failures_total.labels(mode=mode).inc()
            logger.warning(
                f"Unexpected error sending to connection {id(websocket)} "
                f"(user: {user_id}): {e}"
            )
            return False

        notifications_sent_total.labels(mode=mode).inc()
        return True

    async def send_to(self, user_id: int, notification: Notification) -> bool:
        """
        Sends a notification to the connection registered for `user_id`.

        Args:
            user_id: Recipient user id.
            notification: The notification to send.

        Returns:
            True if the frame was handed to the transport. False if the user
            has no registered connection or the write failed. A True result
            does not mean the client received the notification.
        """
        websocket = self.registry.lookup(user_id)
        if websocket is None:
            logger.debug(
                f"No connection registered for user {user_id}, "
                f"dropping {notification.type} notification"
            )
            return False

        sent = await self._safe_send(
            user_id, websocket, serialize_notification(notification), "direct"
        )
        if sent:
            logger.info(f"Notification sent to {user_id}: {notification.type}")
        return sent

    async def broadcast(self, notification: Notification) -> int:
        """
        Sends a notification to every registered connection concurrently.

        Recipients are the connections registered when the call starts;
        connections registered while the broadcast is in flight do not
        receive it. A failed write to one connection does not affect the
        others.

        Args:
            notification: The notification to broadcast.

        Returns:
            int: Number of connections the frame was handed to.
        """
        bindings = self.registry.items()
        if not bindings:
            logger.debug(
                f"Broadcast notification {notification.type} has no recipients"
            )
            return 0

        text = serialize_notification(notification)
        results = await asyncio.gather(
            *[
                self._safe_send(user_id, websocket, text, "broadcast")
                for user_id, websocket in bindings
            ],
            return_exceptions=True,
        )
        delivered = sum(1 for result in results if result is True)

        logger.info(
            f"Broadcast notification: {notification.type} "
            f"({delivered}/{len(bindings)} connections)"
        )
        return delivered
