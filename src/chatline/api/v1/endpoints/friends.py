# src/chatline/api/v1/endpoints/friends.py
"""Friend request endpoints for the Chatline API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from chatline.models import FriendRequest
from chatline.schemas.friend import (
    FriendRequestAction,
    FriendRequestCreate,
    FriendRequestResponse,
)
from chatline.schemas.user import UserSummary
from chatline.services.friends import FriendService

from ..dependencies import IdentityDep, NotifierDep, SessionDep

router = APIRouter(prefix="/friends", tags=["friends"])

FRIEND_REQUEST_RECEIVED = "friend-request-received"
FRIEND_REQUEST_ACCEPTED = "friend-request-accepted"


def _serialize(request: FriendRequest) -> dict[str, Any]:
    return FriendRequestResponse.model_validate(request).model_dump(by_alias=True, mode="json")


@router.get("/requests", response_model=list[FriendRequestResponse])
async def list_requests(identity: IdentityDep, db: SessionDep) -> list[FriendRequestResponse]:
    """Return the caller's pending incoming requests."""
    requests = FriendService(db).pending_for(identity)
    return [FriendRequestResponse.model_validate(request) for request in requests]


@router.post("/request", response_model=FriendRequestResponse)
async def send_request(
    payload: FriendRequestCreate,
    identity: IdentityDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> dict[str, Any]:
    """Send a friend request, notifying the receiver if they are online."""
    request = FriendService(db).send(identity, payload.receiver_id)
    body = _serialize(request)
    await notifier.notify(payload.receiver_id, FRIEND_REQUEST_RECEIVED, body)
    return body


@router.post("/accept")
async def accept_request(
    payload: FriendRequestAction,
    identity: IdentityDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> dict[str, str]:
    """Accept a pending request; both users become friends."""
    request = FriendService(db).accept(identity, payload.request_id)
    sender_identity = request.sender.identity
    await notifier.notify(
        sender_identity,
        FRIEND_REQUEST_ACCEPTED,
        {
            "requestId": request.id,
            "friend": UserSummary.model_validate(request.receiver).model_dump(by_alias=True, mode="json"),
        },
    )
    await notifier.refresh_presence(sender_identity, identity)
    return {"message": "Friend accepted"}


@router.post("/reject")
async def reject_request(payload: FriendRequestAction, identity: IdentityDep, db: SessionDep) -> dict[str, str]:
    """Reject a pending request."""
    FriendService(db).reject(identity, payload.request_id)
    return {"message": "Request rejected"}
