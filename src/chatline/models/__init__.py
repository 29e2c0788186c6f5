# src/chatline/models/__init__.py
"""SQLAlchemy models for the Chatline application."""

from .call_log import CallLog
from .friend_request import FriendRequest
from .message import Message
from .user import User, friendship

__all__ = [
    "CallLog",
    "FriendRequest",
    "Message",
    "User", "friendship",
]
