"""
Dependency injection configuration for FastAPI.

Request handlers reach the application's single `NotificationServer`
through these dependencies instead of a module-level global, so tests can
swap it with `app.dependency_overrides`.

Example:
    ```python
    from fastapi import APIRouter
    from sup_notifier.dependencies import NotificationServerDep

    router = APIRouter()

    @router.post("/api/friends/{friend_id}/accept")
    async def accept_friend(friend_id: int, server: NotificationServerDep):
        ...
        await server.send_notification(friend_id, notification)
    ```
"""

from typing import Annotated

from fastapi import Depends, Request

from sup_notifier.managers.notification_server import NotificationServer


def get_notification_server(request: Request) -> NotificationServer:
    """
    Get the notification server created at application startup.

    Args:
        request: Incoming HTTP request.

    Returns:
        The application's NotificationServer instance.
    """
    return request.app.state.notification_server


NotificationServerDep = Annotated[
    NotificationServer, Depends(get_notification_server)
]
