"""Chat message schemas."""

from typing import Literal

from pydantic import Field

from .common import CamelModel, UtcDatetime


class MessageResponse(CamelModel):
    """Stored chat message, used for both REST history and realtime relays."""

    id: int
    sender_id: str = Field(..., alias="senderId")
    receiver_id: str = Field(..., alias="receiverId")
    content: str
    type: Literal["text", "image"] = "text"
    is_read: bool = Field(False, alias="isRead")
    created_at: UtcDatetime = Field(..., alias="createdAt")
