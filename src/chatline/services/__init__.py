# src/chatline/services/__init__.py
"""Business logic services for the Chatline application.

Only the domain errors are re-exported; import service classes from their
modules (``chatline.services.friends``).
"""

from .errors import (
    ChatlineError,
    ConflictError,
    NotFoundError,
    StorageFailure,
    UnauthorizedError,
)

__all__ = [
    "ChatlineError",
    "ConflictError",
    "NotFoundError",
    "StorageFailure",
    "UnauthorizedError",
]
