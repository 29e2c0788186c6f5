"""Friend request schemas."""

from typing import Literal

from pydantic import Field

from .common import CamelModel, UtcDatetime
from .user import UserSummary


class FriendRequestCreate(CamelModel):
    """Body of a new friend request."""

    receiver_id: str = Field(..., alias="receiverId", min_length=1, description="Identity of the receiver")


class FriendRequestAction(CamelModel):
    """Body for accepting or rejecting a request."""

    request_id: int = Field(..., alias="requestId")


class FriendRequestResponse(CamelModel):
    """Friend request as returned by the API."""

    id: int
    status: Literal["pending", "rejected", "accepted"]
    sender: UserSummary
    receiver: UserSummary
    created_at: UtcDatetime = Field(..., alias="createdAt")
    updated_at: UtcDatetime = Field(..., alias="updatedAt")
