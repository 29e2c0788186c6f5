"""Repositories wrapping SQLAlchemy sessions for each aggregate."""

from .call_log_repo import CallLogRepository
from .friend_request_repo import FriendRequestRepository
from .message_repo import MessageRepository
from .user_repo import UserRepository

__all__ = [
    "CallLogRepository",
    "FriendRequestRepository",
    "MessageRepository",
    "UserRepository",
]
