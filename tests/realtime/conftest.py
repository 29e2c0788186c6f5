# tests/realtime/conftest.py
from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from chatline.realtime.relay import Relay, build_relay
from chatline.realtime.session import ConnectionSession
from chatline.services.errors import StorageFailure


class MemoryStore:
    """In-memory stand-in for ``RelayStore``."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.calls: list[dict[str, Any]] = []
        self.friends: dict[str, set[str]] = {}
        self.fail_messages = False
        self.fail_calls = False

    def befriend(self, first: str, second: str) -> None:
        self.friends.setdefault(first, set()).add(second)
        self.friends.setdefault(second, set()).add(first)

    async def save_message(self, *, sender_id: str, receiver_id: str, content: str, message_type: str) -> dict[str, Any]:
        if self.fail_messages:
            raise StorageFailure("Could not store message")
        message = {
            "id": len(self.messages) + 1,
            "senderId": sender_id,
            "receiverId": receiver_id,
            "content": content,
            "type": message_type,
            "isRead": False,
            "createdAt": "2026-01-01T00:00:00+00:00",
        }
        self.messages.append(message)
        return dict(message)

    async def mark_read(self, *, sender_id: str, reader_id: str) -> int:
        if self.fail_messages:
            raise StorageFailure("Could not mark messages read")
        changed = 0
        for message in self.messages:
            if message["senderId"] == sender_id and message["receiverId"] == reader_id and not message["isRead"]:
                message["isRead"] = True
                changed += 1
        return changed

    async def record_call(self, **fields: Any) -> int:
        if self.fail_calls:
            raise StorageFailure("Could not store call log")
        self.calls.append(fields)
        return len(self.calls)

    async def friend_identities(self, identity: str) -> set[str]:
        return set(self.friends.get(identity, set()))


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def relay(store: MemoryStore) -> Relay:
    return build_relay(store, presence_scope="all")  # type: ignore[arg-type]


@pytest.fixture()
def friends_relay(store: MemoryStore) -> Relay:
    return build_relay(store, presence_scope="friends")  # type: ignore[arg-type]


Connect = Callable[..., Awaitable[ConnectionSession]]


@pytest.fixture()
def connect(relay: Relay) -> Connect:
    """Return a helper that opens a verified session and announces it."""

    async def _connect(identity: str, handle: str | None = None, *, target: Relay | None = None) -> ConnectionSession:
        session = ConnectionSession(handle=handle or f"sid-{identity}", verified_identity=identity)
        await (target or relay).dispatch(session, "user-online", identity)
        return session

    return _connect

