"""Helpers shared by the end-to-end tests."""

import time


def wait_for_presence(client, user_id: int, online: bool = True) -> None:
    """
    Poll the presence endpoint until `user_id` reaches the expected state.

    Registration messages are processed asynchronously by the connection's
    own task, so tests wait for them before dispatching.
    """
    for _ in range(200):
        response = client.get(f"/api/notifications/users/{user_id}")
        if response.json()["online"] is online:
            return
        time.sleep(0.01)
    raise AssertionError(
        f"user {user_id} did not become {'online' if online else 'offline'}"
    )
