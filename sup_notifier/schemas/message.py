from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class ClientMessage(BaseModel):  # type: ignore[misc]
    """Any control message sent by a client; only `type` is required."""

    model_config = ConfigDict(extra="allow")

    type: StrictStr


class RegisterMessage(ClientMessage):
    """Binds the sending connection to `userId`."""

    type: Literal["register"]
    user_id: StrictInt = Field(alias="userId")
