"""Friend request model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatline.db.session import Base
from chatline.db.time import utcnow

if TYPE_CHECKING:
    from .user import User

FRIEND_REQUEST_PENDING = "pending"
FRIEND_REQUEST_REJECTED = "rejected"
FRIEND_REQUEST_ACCEPTED = "accepted"


class FriendRequest(Base):
    """Request from one user to befriend another.

    One row per ordered (sender, receiver) pair; a rejected row is revived in
    place instead of inserting a duplicate.
    """

    __tablename__ = "friend_request"
    __table_args__ = (UniqueConstraint("sender_id", "receiver_id", name="uq_friend_request_pair"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FRIEND_REQUEST_PENDING)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    sender: Mapped[User] = relationship("User", foreign_keys=[sender_id])
    receiver: Mapped[User] = relationship("User", foreign_keys=[receiver_id])
