from fastapi import APIRouter
from starlette.websockets import WebSocket

from sup_notifier.api.ws.protocol import parse_client_message
from sup_notifier.api.ws.websocket import NotificationWebSocketEndpoint
from sup_notifier.constants import WS_NOTIFICATIONS_PATH
from sup_notifier.exceptions import MalformedMessageError
from sup_notifier.logging import logger, set_log_context
from sup_notifier.schemas.message import RegisterMessage
from sup_notifier.utils.metrics import (
    ws_messages_invalid_total,
    ws_messages_received_total,
)

router = APIRouter()


@router.websocket_route(WS_NOTIFICATIONS_PATH)
class Notifications(NotificationWebSocketEndpoint):
    """
    Notification channel consumed by browser clients.

    Clients register right after connecting and then only listen; the
    server pushes notifications whenever a domain event concerns them.
    """

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        """
        Handles one control message from the client.

        - Registration binds the connection to the given user id.
        - Malformed messages are logged and ignored; the connection stays
          open and its registration is unchanged.
        - Any other message type is accepted without effect.

        Args:
            websocket: The WebSocket connection instance
            data: Raw frame payload
        """
        ws_messages_received_total.inc()

        try:
            message = parse_client_message(data)
        except MalformedMessageError as ex:
            ws_messages_invalid_total.inc()
            logger.warning(f"Invalid message: {ex}")
            return

        if isinstance(message, RegisterMessage):
            set_log_context(user_id=message.user_id)
            await self.notification_server.register(message.user_id, websocket)
            return

        logger.debug(f"Ignoring client message of type {message.type!r}")
