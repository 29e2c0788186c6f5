"""Data access helpers for chat messages."""
from __future__ import annotations

from sqlalchemy import and_, or_, select, update
from sqlalchemy.orm import Session

from chatline.models import Message

from .base import commit_or_raise

__all__ = ["MessageRepository"]


class MessageRepository:
    """Thin wrapper around database access for chat messages."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, *, sender_id: str, receiver_id: str, content: str, message_type: str = "text") -> Message:
        """Insert an unread message and return the persisted instance."""
        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            type=message_type,
            is_read=False,
        )
        self.session.add(message)
        commit_or_raise(self.session, "store message")
        self.session.refresh(message)
        return message

    def conversation(self, first: str, second: str) -> list[Message]:
        """Return every message between two identities in insertion order."""
        stmt = (
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == first, Message.receiver_id == second),
                    and_(Message.sender_id == second, Message.receiver_id == first),
                )
            )
            .order_by(Message.id)
        )
        return list(self.session.execute(stmt).scalars())

    def mark_read(self, *, sender_id: str, reader_id: str) -> int:
        """Flip every unread sender→reader message to read.

        Returns:
            Number of messages that changed; zero when nothing was unread.
        """
        stmt = (
            update(Message)
            .where(
                Message.sender_id == sender_id,
                Message.receiver_id == reader_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        commit_or_raise(self.session, "mark messages read")
        return int(result.rowcount or 0)
