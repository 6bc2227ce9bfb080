"""
Tests for the connection registry.

This module tests user id to connection bindings, replacement on duplicate
registration, removal by connection and snapshot semantics.
"""

from sup_notifier.managers.connection_registry import ConnectionRegistry
from tests.mocks.websocket_mocks import create_mock_websocket


class TestConnectionRegistry:
    """Tests for ConnectionRegistry class."""

    def test_init(self):
        """Test ConnectionRegistry initialization."""
        registry = ConnectionRegistry()
        assert registry.connections == {}
        assert len(registry) == 0

    def test_lookup_unregistered_user(self):
        """Test lookup of a user that never registered returns None."""
        registry = ConnectionRegistry()

        assert registry.lookup(7) is None
        assert 7 not in registry

    def test_register(self):
        """Test binding a connection to a user id."""
        registry = ConnectionRegistry()
        mock_ws = create_mock_websocket()

        superseded = registry.register(7, mock_ws)

        assert superseded is None
        assert registry.lookup(7) is mock_ws
        assert 7 in registry
        assert len(registry) == 1

    def test_register_same_connection_twice(self):
        """Test re-registering the same connection is idempotent."""
        registry = ConnectionRegistry()
        mock_ws = create_mock_websocket()

        registry.register(7, mock_ws)
        superseded = registry.register(7, mock_ws)

        assert superseded is None
        assert registry.lookup(7) is mock_ws

    def test_register_replaces_previous_connection(self):
        """Test last registration wins and the old connection is returned."""
        registry = ConnectionRegistry()
        old_ws = create_mock_websocket()
        new_ws = create_mock_websocket()

        registry.register(7, old_ws)
        superseded = registry.register(7, new_ws)

        assert superseded is old_ws
        assert registry.lookup(7) is new_ws
        assert len(registry) == 1

    def test_same_connection_under_multiple_ids(self):
        """Test one connection may be bound to several user ids."""
        registry = ConnectionRegistry()
        mock_ws = create_mock_websocket()

        registry.register(7, mock_ws)
        registry.register(8, mock_ws)

        assert registry.lookup(7) is mock_ws
        assert registry.lookup(8) is mock_ws

    def test_unregister(self):
        """Test removing a connection clears its binding."""
        registry = ConnectionRegistry()
        mock_ws = create_mock_websocket()
        registry.register(7, mock_ws)

        removed = registry.unregister(mock_ws)

        assert removed == [7]
        assert registry.lookup(7) is None
        assert len(registry) == 0

    def test_unregister_removes_every_binding_of_connection(self):
        """Test all user ids bound to the connection are removed."""
        registry = ConnectionRegistry()
        mock_ws = create_mock_websocket()
        other_ws = create_mock_websocket()
        registry.register(7, mock_ws)
        registry.register(8, mock_ws)
        registry.register(9, other_ws)

        removed = registry.unregister(mock_ws)

        assert sorted(removed) == [7, 8]
        assert registry.user_ids() == [9]

    def test_unregister_nonexistent(self):
        """Test unregistering an unknown connection does nothing."""
        registry = ConnectionRegistry()
        mock_ws1 = create_mock_websocket()
        mock_ws2 = create_mock_websocket()
        registry.register(7, mock_ws1)

        removed = registry.unregister(mock_ws2)

        assert removed == []
        assert registry.lookup(7) is mock_ws1

    def test_unregister_superseded_connection_keeps_new_binding(self):
        """Test closing a replaced connection does not drop its successor."""
        registry = ConnectionRegistry()
        old_ws = create_mock_websocket()
        new_ws = create_mock_websocket()
        registry.register(7, old_ws)
        registry.register(7, new_ws)

        removed = registry.unregister(old_ws)

        assert removed == []
        assert registry.lookup(7) is new_ws

    def test_all_returns_snapshot(self):
        """Test mutating the registry does not affect a taken snapshot."""
        registry = ConnectionRegistry()
        mock_ws1 = create_mock_websocket()
        mock_ws2 = create_mock_websocket()
        registry.register(7, mock_ws1)
        registry.register(8, mock_ws2)

        snapshot = registry.all()
        for connection in snapshot:
            registry.unregister(connection)
        registry.register(9, create_mock_websocket())

        assert snapshot == [mock_ws1, mock_ws2]
        assert registry.user_ids() == [9]

    def test_clear(self):
        """Test clearing removes every binding."""
        registry = ConnectionRegistry()
        registry.register(7, create_mock_websocket())
        registry.register(8, create_mock_websocket())

        registry.clear()

        assert registry.all() == []
        assert registry.lookup(7) is None
