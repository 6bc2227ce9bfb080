from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from sup_notifier.constants import NotificationType


class Notification(BaseModel):  # type: ignore[misc]
    """
    Notification pushed to a client over the notification channel.

    Carries no identifier, timestamp or delivery guarantee. `data` is an open
    structured payload and is left out of the wire format when absent.
    """

    type: str
    message: str
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        """
        Build the flat JSON object sent to clients.

        Returns:
            dict[str, Any]: `type`, `message` and, when present, `data`.
        """
        payload = self.model_dump(mode="json", by_alias=True)
        if self.data is None:
            payload.pop("data")
        return payload


class _Payload(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(_Payload):
    lat: float
    lng: float


class FriendRequestData(_Payload):
    request_id: int
    from_user_id: int
    from_username: str


class FriendRequestAcceptedData(_Payload):
    request_id: int
    user_id: int
    username: str


class SupRequestData(_Payload):
    request_id: int
    sender_id: int
    location: Location
    expires_at: datetime


class SupRequestAcceptedData(_Payload):
    request_id: int
    accepted_by: int
    accepted_location: Location


class FriendRequestNotification(Notification):
    type: Literal["friend_request"] = "friend_request"
    data: FriendRequestData

    @classmethod
    def build(
        cls, request_id: int, from_user_id: int, from_username: str
    ) -> "FriendRequestNotification":
        return cls(
            message=f"{from_username} sent you a friend request",
            data=FriendRequestData(
                request_id=request_id,
                from_user_id=from_user_id,
                from_username=from_username,
            ),
        )


class FriendRequestAcceptedNotification(Notification):
    type: Literal["friend_request_accepted"] = "friend_request_accepted"
    data: FriendRequestAcceptedData

    @classmethod
    def build(
        cls, request_id: int, user_id: int, username: str
    ) -> "FriendRequestAcceptedNotification":
        return cls(
            message=f"{username} accepted your friend request",
            data=FriendRequestAcceptedData(
                request_id=request_id, user_id=user_id, username=username
            ),
        )


class SupRequestNotification(Notification):
    type: Literal["sup_request"] = "sup_request"
    data: SupRequestData

    @classmethod
    def build(
        cls,
        request_id: int,
        sender_id: int,
        location: Location,
        expires_at: datetime,
        sender_name: str | None = None,
    ) -> "SupRequestNotification":
        who = sender_name or "A friend"
        return cls(
            message=f"{who} wants to meet up",
            data=SupRequestData(
                request_id=request_id,
                sender_id=sender_id,
                location=location,
                expires_at=expires_at,
            ),
        )


class SupRequestAcceptedNotification(Notification):
    type: Literal["sup_request_accepted"] = "sup_request_accepted"
    data: SupRequestAcceptedData

    @classmethod
    def build(
        cls,
        request_id: int,
        accepted_by: int,
        accepted_location: Location,
        accepted_by_name: str | None = None,
    ) -> "SupRequestAcceptedNotification":
        who = accepted_by_name or "A friend"
        return cls(
            message=f"{who} accepted your sup request",
            data=SupRequestAcceptedData(
                request_id=request_id,
                accepted_by=accepted_by,
                accepted_location=accepted_location,
            ),
        )


NOTIFICATION_KINDS: dict[str, type[Notification]] = {
    NotificationType.FRIEND_REQUEST: FriendRequestNotification,
    NotificationType.FRIEND_REQUEST_ACCEPTED: FriendRequestAcceptedNotification,
    NotificationType.SUP_REQUEST: SupRequestNotification,
    NotificationType.SUP_REQUEST_ACCEPTED: SupRequestAcceptedNotification,
}


def parse_notification(payload: dict[str, Any]) -> Notification:
    """
    Validate a notification payload into its most specific model.

    Payloads whose `type` names a known notification kind must match that
    kind's structured `data`; any other `type` falls back to the generic
    `Notification` with an open `data` field.

    Args:
        payload: Notification as a plain dict (wire field names).

    Returns:
        Notification: Validated notification instance.

    Raises:
        pydantic.ValidationError: If the payload does not match the model.
    """
    kind = payload.get("type")
    model = (
        NOTIFICATION_KINDS.get(kind, Notification)
        if isinstance(kind, str)
        else Notification
    )
    return model.model_validate(payload)
