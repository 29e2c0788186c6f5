"""Models describing direct messages between users."""

from datetime import datetime

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chatline.db.session import Base
from chatline.db.time import utcnow

MESSAGE_TYPES = ("text", "image")


class Message(Base):
    """Chat message exchanged between two identities.

    The autoincrement id is the conversation order; history queries sort on it.
    """

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_pair_unread", "sender_id", "receiver_id", "is_read"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Identities, not user row ids, so realtime handlers never need a lookup.
    sender_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    receiver_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(8), nullable=False, default="text")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
