"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the notification server, the
FastAPI application and the test client.
"""

import os
import tempfile

import pytest

# Keep the error log out of the working tree before importing app modules
os.environ.setdefault(
    "LOG_FILE_PATH",
    os.path.join(tempfile.gettempdir(), "sup_notifier_test_errors.log"),
)


@pytest.fixture
def notification_server():
    """
    Provides a NotificationServer with a long heartbeat interval.

    Returns:
        NotificationServer: Fresh server instance
    """
    from sup_notifier.managers.notification_server import NotificationServer

    return NotificationServer(heartbeat_interval=60, close_timeout=1)


@pytest.fixture
def app():
    """
    Create a fresh FastAPI application.

    Returns:
        FastAPI: FastAPI application instance.
    """
    from sup_notifier import application

    return application()


@pytest.fixture
def client(app):
    """
    Test client with the application lifespan running.

    All WebSocket sessions and HTTP requests made through this client share
    one event loop, like connections served by a real server.

    Yields:
        TestClient: FastAPI test client instance.
    """
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
