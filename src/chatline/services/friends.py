"""Friend request rules.

At most one non-rejected request exists per ordered (sender, receiver) pair.
A rejected request is revived in place by a new request from the same sender;
accepted requests are terminal.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from chatline.models import FriendRequest, User
from chatline.models.friend_request import (
    FRIEND_REQUEST_PENDING,
    FRIEND_REQUEST_REJECTED,
)
from chatline.repositories import FriendRequestRepository, UserRepository

from .errors import ConflictError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class FriendService:
    """Send, accept and reject friend requests on behalf of an identity."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.requests = FriendRequestRepository(db)

    def _require_user(self, identity: str) -> User:
        user = self.users.get_by_identity(identity)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _require_request(self, request_id: int) -> FriendRequest:
        request = self.requests.get(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def pending_for(self, identity: str) -> list[FriendRequest]:
        """Return pending requests addressed to ``identity``."""
        return self.requests.list_pending_for(self._require_user(identity))

    def send(self, sender_identity: str, receiver_identity: str) -> FriendRequest:
        """Create a request, or revive a rejected one.

        Raises:
            NotFoundError: If either user has not synced a profile.
            ConflictError: If the users are already friends, the sender targets
                themselves, or a pending/accepted request already exists.
        """
        sender = self._require_user(sender_identity)
        receiver = self._require_user(receiver_identity)
        if sender.id == receiver.id:
            raise ConflictError("Cannot send a friend request to yourself")
        if sender.is_friend_of(receiver):
            raise ConflictError("Already friends")

        existing = self.requests.find_pair(sender, receiver)
        if existing is not None:
            if existing.status != FRIEND_REQUEST_REJECTED:
                raise ConflictError("Request already sent")
            logger.info("Reviving rejected friend request %s from %s", existing.id, sender_identity)
            return self.requests.set_status(existing, FRIEND_REQUEST_PENDING)

        return self.requests.create(sender, receiver)

    def accept(self, identity: str, request_id: int) -> FriendRequest:
        """Accept a pending request addressed to ``identity``."""
        request = self._check_actionable(identity, request_id)
        accepted = self.requests.accept(request)
        logger.info("Friend request %s accepted by %s", request_id, identity)
        return accepted

    def reject(self, identity: str, request_id: int) -> FriendRequest:
        """Reject a pending request addressed to ``identity``."""
        request = self._check_actionable(identity, request_id)
        return self.requests.set_status(request, FRIEND_REQUEST_REJECTED)

    def _check_actionable(self, identity: str, request_id: int) -> FriendRequest:
        user = self._require_user(identity)
        request = self._require_request(request_id)
        if request.receiver_id != user.id:
            raise UnauthorizedError("Unauthorized")
        if request.status != FRIEND_REQUEST_PENDING:
            raise ConflictError(f"Request already {request.status}")
        return request
