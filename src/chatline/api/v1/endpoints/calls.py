# src/chatline/api/v1/endpoints/calls.py
"""Call history endpoints for the Chatline API."""

from __future__ import annotations

from fastapi import APIRouter, status

from chatline.repositories import CallLogRepository
from chatline.schemas.call import CallLogCreate, CallLogResponse
from chatline.services.errors import UnauthorizedError

from ..dependencies import IdentityDep, SessionDep

router = APIRouter(prefix="/calls", tags=["calls"])


@router.get("/history/{user_id}", response_model=list[CallLogResponse])
async def call_history(user_id: str, identity: IdentityDep, db: SessionDep) -> list[CallLogResponse]:
    """Return the caller's own call history, newest first."""
    if user_id != identity:
        raise UnauthorizedError("Unauthorized access to call history")
    records = CallLogRepository(db).history(identity)
    return [CallLogResponse.model_validate(record) for record in records]


@router.post("/log", response_model=CallLogResponse, status_code=status.HTTP_201_CREATED)
async def log_call(payload: CallLogCreate, identity: IdentityDep, db: SessionDep) -> CallLogResponse:
    """Record a call the caller took part in."""
    if identity not in (payload.caller_id, payload.receiver_id):
        raise UnauthorizedError("Cannot log a call you were not part of")
    record = CallLogRepository(db).create(
        caller_id=payload.caller_id,
        receiver_id=payload.receiver_id,
        call_type=payload.call_type,
        call_status=payload.call_status,
    )
    return CallLogResponse.model_validate(record)
