"""Async access to durable storage for the realtime core.

Repositories are synchronous SQLAlchemy code; each call here opens a
short-lived session and runs it in a worker thread so event handlers only
suspend, never block the loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatline.db.session import SessionLocal
from chatline.repositories import CallLogRepository, MessageRepository, UserRepository
from chatline.schemas.message import MessageResponse
from chatline.services.errors import StorageFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RelayStore:
    """Storage collaborator consumed by call tracking, chat delivery and presence."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def _run(self, action: str, work: Callable[[Session], T]) -> T:
        def _in_session() -> T:
            with self._session_factory() as db:
                return work(db)

        try:
            return await asyncio.to_thread(_in_session)
        except SQLAlchemyError as exc:
            logger.error("Storage failure while trying to %s: %s", action, exc)
            raise StorageFailure(f"Could not {action}") from exc

    async def save_message(
        self,
        *,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str,
    ) -> dict[str, Any]:
        """Persist a message and return its wire form (server id and timestamp included)."""

        def work(db: Session) -> dict[str, Any]:
            message = MessageRepository(db).create(
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                message_type=message_type,
            )
            return MessageResponse.model_validate(message).model_dump(by_alias=True, mode="json")

        return await self._run("store message", work)

    async def mark_read(self, *, sender_id: str, reader_id: str) -> int:
        """Mark sender→reader messages read; returns how many changed."""
        return await self._run(
            "mark messages read",
            lambda db: MessageRepository(db).mark_read(sender_id=sender_id, reader_id=reader_id),
        )

    async def record_call(
        self,
        *,
        caller_id: str,
        receiver_id: str,
        call_type: str,
        call_status: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> int:
        """Append a terminal call log record and return its id."""

        def work(db: Session) -> int:
            record = CallLogRepository(db).create(
                caller_id=caller_id,
                receiver_id=receiver_id,
                call_type=call_type,
                call_status=call_status,
                start_time=start_time,
                end_time=end_time,
            )
            return record.id

        return await self._run("store call log", work)

    async def friend_identities(self, identity: str) -> set[str]:
        """Return the identities befriended by ``identity``."""
        return await self._run(
            "load friends",
            lambda db: UserRepository(db).friend_identities(identity),
        )
