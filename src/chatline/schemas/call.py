"""Call log schemas."""

from typing import Literal

from pydantic import Field

from .common import CamelModel, UtcDatetime

CallType = Literal["audio", "video"]
CallStatus = Literal["accepted", "rejected", "missed", "canceled"]


class CallLogCreate(CamelModel):
    """Body for recording a call outside the realtime path."""

    caller_id: str = Field(..., alias="callerId", min_length=1)
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    call_type: CallType = Field(..., alias="callType")
    call_status: CallStatus = Field("missed", alias="callStatus")


class CallLogResponse(CamelModel):
    """Call log record as returned by the API."""

    id: int
    caller_id: str = Field(..., alias="callerId")
    receiver_id: str = Field(..., alias="receiverId")
    call_type: CallType = Field(..., alias="callType")
    call_status: CallStatus = Field(..., alias="callStatus")
    start_time: UtcDatetime = Field(..., alias="startTime")
    end_time: UtcDatetime | None = Field(None, alias="endTime")
    created_at: UtcDatetime = Field(..., alias="createdAt")
