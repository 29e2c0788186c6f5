"""SQLAlchemy models for user profiles and friendships."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatline.db.session import Base
from chatline.db.time import utcnow

# Symmetric: an accepted friendship is stored as two rows, one per direction.
friendship = Table(
    "friendship",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", Integer, ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Profile synced from the identity provider, keyed by its stable subject."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity: Mapped[str] = mapped_column(Text, unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    friends: Mapped[list[User]] = relationship(
        "User",
        secondary=friendship,
        primaryjoin=lambda: User.id == friendship.c.user_id,
        secondaryjoin=lambda: User.id == friendship.c.friend_id,
        order_by=lambda: User.full_name,
    )

    def is_friend_of(self, other: User) -> bool:
        """Return True if ``other`` is in this user's friend list."""
        return any(friend.id == other.id for friend in self.friends)
