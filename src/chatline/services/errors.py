"""Domain errors shared by the REST layer and the realtime core.

A target without a live connection is not an error; the relay reports it as
an event.
"""

from __future__ import annotations


class ChatlineError(RuntimeError):
    """Base class for all Chatline domain errors."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(ChatlineError):
    """A referenced user, request or message does not exist."""

    default_message = "Not found"


class UnauthorizedError(ChatlineError):
    """The caller's identity is not the party the resource expects."""

    default_message = "Unauthorized"


class ConflictError(ChatlineError):
    """The operation collides with existing state (duplicate request, already friends)."""

    default_message = "Conflict"


class StorageFailure(ChatlineError):
    """A durable write or read failed."""

    default_message = "Server error"
