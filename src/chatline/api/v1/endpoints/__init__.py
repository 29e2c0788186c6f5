# src/chatline/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .calls import router as calls_router
from .chat import router as chat_router
from .friends import router as friends_router
from .users import router as users_router

__all__ = [
    "calls_router",
    "chat_router",
    "friends_router",
    "users_router",
]
