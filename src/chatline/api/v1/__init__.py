# src/chatline/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import calls_router, chat_router, friends_router, users_router

__all__ = [
    "calls_router",
    "chat_router",
    "friends_router",
    "users_router",
]
