"""Payloads of inbound realtime events.

Field names follow the wire format used by the web client (camelCase); the
models also accept snake_case so server-side callers can build them directly.
"""

from typing import Any

from pydantic import Field

from .call import CallType
from .common import CamelModel


class UserOnline(CamelModel):
    """Presence announcement for the connection's identity."""

    user_id: str = Field(..., alias="userId", min_length=1)
    profile: dict[str, Any] = Field(default_factory=dict)


class CallUser(CamelModel):
    """Caller rings a receiver."""

    caller_id: str = Field(..., alias="callerId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    call_type: CallType = Field("audio", alias="callType")
    caller_name: str | None = Field(None, alias="callerName")
    caller_avatar: str | None = Field(None, alias="callerAvatar")


class CallAccepted(CamelModel):
    """Receiver accepts; ``signal`` is the opaque WebRTC answer."""

    caller_id: str = Field(..., alias="callerId", min_length=1)
    signal: Any = None


class CallRejected(CamelModel):
    """Receiver declines a ringing call."""

    caller_id: str = Field(..., alias="callerId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    call_type: CallType | None = Field(None, alias="callType")


class SignalRelay(CamelModel):
    """Opaque offer/answer/ICE candidate addressed to one identity."""

    target_id: str = Field(..., alias="targetId", min_length=1)
    signal: Any = None


class EndCall(CamelModel):
    """Either party hangs up."""

    caller_id: str = Field(..., alias="callerId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    call_type: CallType | None = Field(None, alias="callType")


class SendMessage(CamelModel):
    """Direct message from the connection's identity."""

    sender_id: str = Field(..., alias="senderId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    content: str = Field(..., min_length=1)
    type: str = Field("text", pattern="^(text|image)$")
    client_id: str | None = Field(None, alias="clientId")


class TypingNotice(CamelModel):
    """``typing`` / ``stop-typing`` indicator."""

    sender_id: str = Field(..., alias="senderId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)


class MarkRead(CamelModel):
    """Reader (``receiverId``) has consumed everything ``senderId`` sent them."""

    sender_id: str = Field(..., alias="senderId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
