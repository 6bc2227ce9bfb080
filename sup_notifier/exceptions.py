"""
Custom exception classes for the notification server.

This module defines custom exceptions for more specific error reporting
in the WebSocket protocol handling.
"""


class MalformedMessageError(ValueError):
    """
    Inbound client message could not be understood.

    Raised when a frame is not valid JSON, is not a JSON object, or is a
    registration message without a valid integer user id. The connection
    that sent it is kept open.
    """

    pass
