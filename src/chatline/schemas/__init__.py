"""
Pydantic schemas for API request/response models and realtime payloads.

These schemas define the structure of API data for serialization and validation.
"""

from .call import CallLogCreate, CallLogResponse
from .friend import FriendRequestAction, FriendRequestCreate, FriendRequestResponse
from .message import MessageResponse
from .user import UserProfile, UserSummary, UserSyncRequest

__all__ = [
    "CallLogCreate", "CallLogResponse",
    "FriendRequestAction", "FriendRequestCreate", "FriendRequestResponse",
    "MessageResponse",
    "UserProfile", "UserSummary", "UserSyncRequest",
]
