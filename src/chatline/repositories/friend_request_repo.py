"""Data access helpers for friend requests."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from chatline.models import FriendRequest, User
from chatline.models.friend_request import FRIEND_REQUEST_ACCEPTED, FRIEND_REQUEST_PENDING

from .base import commit_or_raise

__all__ = ["FriendRequestRepository"]


class FriendRequestRepository:
    """Thin wrapper around database access for friend requests."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, request_id: int) -> FriendRequest | None:
        """Return a request by identifier."""
        return self.session.get(FriendRequest, request_id)

    def find_pair(self, sender: User, receiver: User) -> FriendRequest | None:
        """Return the request for the ordered (sender, receiver) pair, if any."""
        stmt = select(FriendRequest).where(
            FriendRequest.sender_id == sender.id,
            FriendRequest.receiver_id == receiver.id,
        )
        return self.session.execute(stmt).scalars().first()

    def list_pending_for(self, receiver: User) -> list[FriendRequest]:
        """Return pending requests addressed to ``receiver``, oldest first."""
        stmt = (
            select(FriendRequest)
            .options(selectinload(FriendRequest.sender))
            .where(
                FriendRequest.receiver_id == receiver.id,
                FriendRequest.status == FRIEND_REQUEST_PENDING,
            )
            .order_by(FriendRequest.id)
        )
        return list(self.session.execute(stmt).scalars())

    def create(self, sender: User, receiver: User) -> FriendRequest:
        """Insert a new pending request."""
        request = FriendRequest(
            sender_id=sender.id,
            receiver_id=receiver.id,
            status=FRIEND_REQUEST_PENDING,
        )
        self.session.add(request)
        commit_or_raise(self.session, "create friend request", conflict="Request already sent")
        self.session.refresh(request)
        return request

    def set_status(self, request: FriendRequest, status: str) -> FriendRequest:
        """Persist a status change that has no side effects on friend lists."""
        request.status = status
        commit_or_raise(self.session, f"mark friend request {status}")
        self.session.refresh(request)
        return request

    def accept(self, request: FriendRequest) -> FriendRequest:
        """Mark ``request`` accepted and link both users in one commit."""
        sender = request.sender
        receiver = request.receiver
        request.status = FRIEND_REQUEST_ACCEPTED
        if not sender.is_friend_of(receiver):
            sender.friends.append(receiver)
        if not receiver.is_friend_of(sender):
            receiver.friends.append(sender)
        commit_or_raise(self.session, "accept friend request", conflict="Request already accepted")
        self.session.refresh(request)
        return request
