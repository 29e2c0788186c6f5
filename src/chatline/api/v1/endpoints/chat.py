# src/chatline/api/v1/endpoints/chat.py
"""Chat history endpoints for the Chatline API."""

from __future__ import annotations

from fastapi import APIRouter

from chatline.repositories import MessageRepository
from chatline.schemas.message import MessageResponse

from ..dependencies import IdentityDep, SessionDep

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/{other_user_id}", response_model=list[MessageResponse])
async def conversation(other_user_id: str, identity: IdentityDep, db: SessionDep) -> list[MessageResponse]:
    """Return every message exchanged with ``other_user_id``, oldest first."""
    messages = MessageRepository(db).conversation(identity, other_user_id)
    return [MessageResponse.model_validate(message) for message in messages]
