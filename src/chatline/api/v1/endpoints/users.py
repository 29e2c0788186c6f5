# src/chatline/api/v1/endpoints/users.py
"""User profile endpoints for the Chatline API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from chatline.repositories import UserRepository
from chatline.schemas.user import UserProfile, UserSummary, UserSyncRequest

from ..dependencies import CurrentUserDep, IdentityDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync", response_model=UserSummary)
async def sync_user(payload: UserSyncRequest, identity: IdentityDep, db: SessionDep) -> UserSummary:
    """Create or refresh the caller's profile from the identity provider's data."""
    user = UserRepository(db).upsert(
        identity,
        email=payload.email,
        full_name=payload.full_name,
        image_url=payload.image_url,
    )
    logger.info("Synced profile for %s", identity)
    return UserSummary.model_validate(user)


@router.get("/search", response_model=list[UserSummary])
async def search_users(
    identity: IdentityDep,
    db: SessionDep,
    query: str = Query("", max_length=200),
) -> list[UserSummary]:
    """Find other users by name or email."""
    query = query.strip()
    if not query:
        return []
    users = UserRepository(db).search(query, exclude_identity=identity)
    return [UserSummary.model_validate(user) for user in users]


@router.get("/me", response_model=UserProfile)
async def read_me(current_user: CurrentUserDep) -> UserProfile:
    """Return the caller's profile with their friends."""
    return UserProfile.model_validate(current_user)
