"""Direct message delivery, typing indicators and read receipts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from chatline.schemas.events import MarkRead, SendMessage, TypingNotice
from chatline.services.errors import StorageFailure

from .router import Delivery, EventRouter
from .session import ConnectionSession
from .store import RelayStore

logger = logging.getLogger(__name__)

MESSAGE_ERROR = "message-error"


class ChatDelivery:
    """Persists messages before relaying them.

    Writes for one conversation are serialized so that messages are stored,
    and therefore relayed, in the order their events were dispatched.
    """

    def __init__(self, router: EventRouter, store: RelayStore) -> None:
        self.router = router
        self.store = store
        self._conversation_locks: dict[frozenset[str], asyncio.Lock] = {}
        self._lock_users: dict[frozenset[str], int] = {}

    def install(self) -> None:
        """Register this component's handlers on the router."""
        self.router.register("send-message", self.send_message)
        self.router.register("typing", self.typing)
        self.router.register("stop-typing", self.stop_typing)
        self.router.register("mark-read", self.mark_read)

    @asynccontextmanager
    async def _conversation(self, first: str, second: str) -> AsyncIterator[None]:
        key = frozenset((first, second))
        lock = self._conversation_locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._conversation_locks[key]

    async def send_message(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(SendMessage, data)
        if (denied := self.router.check_actor(session, event.sender_id, "send-message")) is not None:
            return [denied]

        async with self._conversation(event.sender_id, event.receiver_id):
            try:
                message = await self.store.save_message(
                    sender_id=event.sender_id,
                    receiver_id=event.receiver_id,
                    content=event.content,
                    message_type=event.type,
                )
            except StorageFailure:
                logger.exception("Error storing message from %s to %s", event.sender_id, event.receiver_id)
                return [
                    Delivery(
                        session.handle,
                        MESSAGE_ERROR,
                        {
                            "clientId": event.client_id,
                            "receiverId": event.receiver_id,
                            "error": "storage_failure",
                        },
                    )
                ]

            relayed = await self.router.deliver_to(event.receiver_id, "new-message", message)

        echo = {**message, "clientId": event.client_id, "delivered": bool(relayed)}
        return [*relayed, Delivery(session.handle, "message-sent", echo)]

    async def typing(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        return await self._relay_typing(session, "typing", data)

    async def stop_typing(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        return await self._relay_typing(session, "stop-typing", data)

    async def _relay_typing(self, session: ConnectionSession, event_name: str, data: Any) -> list[Delivery]:
        event = self.router.parse(TypingNotice, data)
        if event.sender_id != session.identity:
            return []
        return await self.router.deliver_to(event.receiver_id, event_name, {"senderId": event.sender_id})

    async def mark_read(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(MarkRead, data)
        if (denied := self.router.check_actor(session, event.receiver_id, "mark-read")) is not None:
            return [denied]

        async with self._conversation(event.sender_id, event.receiver_id):
            try:
                changed = await self.store.mark_read(sender_id=event.sender_id, reader_id=event.receiver_id)
            except StorageFailure:
                logger.exception("Error marking messages from %s read by %s", event.sender_id, event.receiver_id)
                return [
                    Delivery(
                        session.handle,
                        MESSAGE_ERROR,
                        {"senderId": event.sender_id, "error": "storage_failure"},
                    )
                ]

        if not changed:
            return []
        logger.debug("%s read %d messages from %s", event.receiver_id, changed, event.sender_id)
        return await self.router.deliver_to(
            event.sender_id, "messages-read", {"readerId": event.receiver_id}
        )
