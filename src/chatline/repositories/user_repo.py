"""Data access helpers for user profiles and friendships."""
from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from chatline.models import User

from .base import commit_or_raise

__all__ = ["UserRepository"]

SEARCH_LIMIT = 10


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_identity(self, identity: str, *, with_friends: bool = False) -> User | None:
        """Return the user synced for ``identity``."""
        stmt = select(User).where(User.identity == identity)
        if with_friends:
            stmt = stmt.options(selectinload(User.friends))
        return self.session.execute(stmt).scalars().first()

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by primary key."""
        return self.session.get(User, user_id)

    def upsert(
        self,
        identity: str,
        *,
        email: str,
        full_name: str,
        image_url: str | None,
    ) -> User:
        """Create or refresh the profile for ``identity``."""
        user = self.get_by_identity(identity)
        if user is None:
            user = User(identity=identity, email=email, full_name=full_name, image_url=image_url)
            self.session.add(user)
        else:
            user.email = email
            user.full_name = full_name
            user.image_url = image_url
        commit_or_raise(self.session, "sync user profile")
        self.session.refresh(user)
        return user

    def search(self, query: str, *, exclude_identity: str, limit: int = SEARCH_LIMIT) -> list[User]:
        """Case-insensitive match on name or email, excluding the caller."""
        pattern = _like_pattern(query)
        stmt = (
            select(User)
            .where(
                User.identity != exclude_identity,
                or_(
                    User.full_name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(User.full_name)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def friend_identities(self, identity: str) -> set[str]:
        """Return the identities of everyone befriended by ``identity``."""
        user = self.get_by_identity(identity, with_friends=True)
        if user is None:
            return set()
        return {friend.identity for friend in user.friends}
