"""
Parsing of control messages sent by notification clients.

Clients send JSON text frames. The only message with an effect is
registration (`{"type": "register", "userId": <int>}`); any other
well-formed message is accepted and ignored.
"""

import json

from pydantic import ValidationError

from sup_notifier.constants import ClientMessageType
from sup_notifier.exceptions import MalformedMessageError
from sup_notifier.schemas.message import ClientMessage, RegisterMessage


def parse_client_message(raw: str | bytes) -> ClientMessage:
    """
    Parse one inbound frame.

    Args:
        raw: Frame payload, text or UTF-8 encoded bytes.

    Returns:
        ClientMessage: A `RegisterMessage` for registrations, otherwise a
        generic `ClientMessage` carrying the message type and extra fields.

    Raises:
        MalformedMessageError: If the frame is not a JSON object with a
            string `type`, or is a registration without an integer `userId`.
    """
    try:
        payload = json.loads(raw)
    except ValueError as ex:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MalformedMessageError(f"Invalid JSON: {ex}") from ex

    if not isinstance(payload, dict):
        raise MalformedMessageError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    model = (
        RegisterMessage
        if payload.get("type") == ClientMessageType.REGISTER
        else ClientMessage
    )

    try:
        return model.model_validate(payload)
    except ValidationError as ex:
        raise MalformedMessageError(
            f"Invalid {payload.get('type') or 'untyped'} message: "
            f"{ex.error_count()} validation error(s)"
        ) from ex
