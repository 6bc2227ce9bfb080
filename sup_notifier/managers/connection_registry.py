from starlette.websockets import WebSocket

from sup_notifier.logging import logger


class ConnectionRegistry:
    """
    Registry of addressable notification connections.

    Maps user ids to the WebSocket connection that registered for them,
    giving O(1) lookups for targeted delivery. Only one connection is
    addressable per user id; a newer registration replaces the older one.
    """

    def __init__(self) -> None:
        """
        Initializes a new instance of the `ConnectionRegistry` class.

        The `connections` attribute is a dict mapping user ids to WebSocket
        connections.
        """
        self.connections: dict[int, WebSocket] = {}

    def __len__(self) -> int:
        return len(self.connections)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self.connections

    def register(self, user_id: int, websocket: WebSocket) -> WebSocket | None:
        """
        Binds a WebSocket connection to a user id.

        An existing binding for the same user id is overwritten. The same
        connection may be registered under several user ids.

        Args:
            user_id: Application-level user identity.
            websocket: The WebSocket connection to bind.

        Returns:
            The previously bound connection if it was a different one,
            None otherwise. The caller is responsible for closing it.
        """
        previous = self.connections.get(user_id)
        self.connections[user_id] = websocket
        logger.debug(
            f"websocket object ({id(websocket)}) registered for user {user_id}"
        )

        if previous is None or previous is websocket:
            return None
        return previous

    def unregister(self, websocket: WebSocket) -> list[int]:
        """
        Removes every binding that points at the given connection.

        Safe to call for connections that were never registered.

        Args:
            websocket: The WebSocket connection to remove.

        Returns:
            The user ids whose bindings were removed.
        """
        removed = [
            user_id
            for user_id, connection in list(self.connections.items())
            if connection is websocket
        ]
        for user_id in removed:
            del self.connections[user_id]
            logger.debug(
                f"websocket object ({id(websocket)}) unregistered for user {user_id}"
            )
        return removed

    def lookup(self, user_id: int) -> WebSocket | None:
        """
        Get the WebSocket connection bound to a user id.

        Args:
            user_id: The user id to look up.

        Returns:
            WebSocket connection if registered, None otherwise.
        """
        return self.connections.get(user_id)

    def items(self) -> list[tuple[int, WebSocket]]:
        """Snapshot of (user id, connection) bindings."""
        return list(self.connections.items())

    def all(self) -> list[WebSocket]:
        """
        Snapshot of all registered connections.

        The returned list is a copy, so registrations and disconnects that
        happen while a caller iterates over it do not affect the iteration.
        """
        return list(self.connections.values())

    def user_ids(self) -> list[int]:
        """Snapshot of all registered user ids."""
        return list(self.connections.keys())

    def clear(self) -> None:
        self.connections.clear()
