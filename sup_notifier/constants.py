"""
Application-level constants for the notification protocol.

These values define wire-level behavior shared with browser clients and
should NEVER be changed via environment variables or configuration.

For configurable values (heartbeat interval, ping timeout, logging, etc.),
see sup_notifier/settings.py.
"""

from enum import StrEnum

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Dedicated path for the notification channel
WS_NOTIFICATIONS_PATH = "/ws/notifications"

# Close code sent to a connection superseded by a newer registration
# of the same user (private-use range 4000-4999, RFC 6455)
WS_REPLACED_CLOSE_CODE = 4000
WS_REPLACED_CLOSE_REASON = "Replaced by new connection"


class ClientMessageType(StrEnum):
    """
    Control message types a client may send over the notification channel.

    Attributes:
        REGISTER: Binds the connection to a user id. Must be sent right
            after connecting for the connection to become addressable.
    """

    REGISTER = "register"


class NotificationType(StrEnum):
    """
    Known notification categories pushed to clients.

    Attributes:
        FRIEND_REQUEST: Someone sent the recipient a friend request
        FRIEND_REQUEST_ACCEPTED: The recipient's friend request was accepted
        SUP_REQUEST: A friend created a new sup (meetup) request
        SUP_REQUEST_ACCEPTED: The recipient's sup request was accepted
    """

    FRIEND_REQUEST = "friend_request"
    FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
    SUP_REQUEST = "sup_request"
    SUP_REQUEST_ACCEPTED = "sup_request_accepted"


# ============================================================================
# Logging Constants
# ============================================================================

# Maximum size of one JSON log line written by the file handler
MAX_LOG_SIZE_BYTES = 100_000
