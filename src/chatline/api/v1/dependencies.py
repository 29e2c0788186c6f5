"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from chatline.core.security import InvalidTokenError, verify_access_token
from chatline.db.session import get_db
from chatline.models import User
from chatline.realtime.gateway import get_notifier
from chatline.realtime.notifier import Notifier
from chatline.repositories import UserRepository

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

# Type alias for realtime push dependency
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Return the identity carried by the bearer token.

    Raises:
        HTTPException: If the token is invalid or expired
    """
    try:
        return verify_access_token(credentials.credentials)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


# Type alias for the verified identity
IdentityDep = Annotated[str, Depends(get_current_identity)]


def get_current_user(identity: IdentityDep, db: SessionDep) -> User:
    """Get the synced profile of the authenticated identity.

    Raises:
        HTTPException: If the identity has not synced a profile yet
    """
    user = UserRepository(db).get_by_identity(identity, with_friends=True)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
