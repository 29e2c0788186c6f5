"""Identity verification helpers built on signed JWT bearer tokens.

Tokens are minted by the external identity provider; the subject claim is the
caller's stable identity. ``create_access_token`` exists for tests and tooling
that need to mint a compatible token locally.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from chatline.core.settings import settings


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be verified or carries no subject."""


def create_access_token(identity: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a signed access token whose subject is ``identity``."""
    to_encode: dict[str, object] = {"sub": identity}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def verify_access_token(token: str) -> str:
    """Return the identity carried by ``token``.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise InvalidTokenError(str(err)) from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("Token has no subject")
    return subject
