"""
Internal dispatch API.

Lets the application shell (friend and sup request handlers, possibly in
another process on the same host) push notifications through the HTTP
layer. Delivery is best effort; responses never fail because a recipient
is offline.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import BaseModel, ValidationError

from sup_notifier.dependencies import NotificationServerDep
from sup_notifier.schemas.notification import Notification, parse_notification

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class DeliveryResponse(BaseModel):
    delivered: bool


class BroadcastResponse(BaseModel):
    recipients: int


class PresenceResponse(BaseModel):
    user_id: int
    online: bool


def _to_notification(payload: dict[str, Any]) -> Notification:
    try:
        return parse_notification(payload)
    except ValidationError as ex:
        raise HTTPException(
            status_code=422,
            detail=ex.errors(include_url=False, include_context=False),
        ) from ex


@router.get("/users/{user_id}", response_model=PresenceResponse)
async def get_presence(
    user_id: int, server: NotificationServerDep
) -> PresenceResponse:
    """Whether `user_id` currently has a registered notification connection."""
    return PresenceResponse(user_id=user_id, online=server.is_online(user_id))


@router.post(
    "/users/{user_id}",
    response_model=DeliveryResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def send_notification(
    user_id: int,
    server: NotificationServerDep,
    payload: dict[str, Any] = Body(...),
) -> DeliveryResponse:
    """
    Send a notification to one user.

    `delivered` tells whether the frame was handed to the user's connection;
    it is not an acknowledgement from the client.
    """
    notification = _to_notification(payload)
    delivered = await server.send_notification(user_id, notification)
    return DeliveryResponse(delivered=delivered)


@router.post(
    "/broadcast",
    response_model=BroadcastResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def broadcast_notification(
    server: NotificationServerDep,
    payload: dict[str, Any] = Body(...),
) -> BroadcastResponse:
    """Send a notification to every registered user."""
    notification = _to_notification(payload)
    recipients = await server.broadcast_notification(notification)
    return BroadcastResponse(recipients=recipients)
