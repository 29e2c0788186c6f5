"""User-related Pydantic schemas."""

from pydantic import Field

from .common import CamelModel


class UserSyncRequest(CamelModel):
    """Profile fields pushed by the client after signing in."""

    email: str = Field(..., min_length=3, max_length=320, description="Primary email address")
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=200, description="Display name")
    image_url: str | None = Field(None, alias="imageUrl", description="Avatar URL")


class UserSummary(CamelModel):
    """Public profile fields shown in search results and friend lists."""

    identity: str = Field(..., alias="userId")
    email: str
    full_name: str = Field(..., alias="fullName")
    image_url: str | None = Field(None, alias="imageUrl")


class UserProfile(UserSummary):
    """The caller's own profile including their friends."""

    friends: list[UserSummary] = Field(default_factory=list)
