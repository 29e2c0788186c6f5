# tests/realtime/test_relay_store.py
"""Tests for the database-backed relay store."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from chatline.models import CallLog, Message
from chatline.realtime.store import RelayStore
from chatline.services.errors import StorageFailure


@pytest.fixture()
def relay_store(session_factory, db_session) -> RelayStore:
    return RelayStore(session_factory)


@pytest.mark.asyncio
async def test_save_message_returns_wire_form(relay_store, db_session) -> None:
    saved = await relay_store.save_message(sender_id="u1", receiver_id="u2", content="hi", message_type="text")

    assert saved["senderId"] == "u1"
    assert saved["receiverId"] == "u2"
    assert saved["isRead"] is False
    assert saved["type"] == "text"
    assert isinstance(saved["id"], int)
    assert saved["createdAt"].endswith("+00:00")

    stored = db_session.execute(select(Message)).scalars().one()
    assert stored.id == saved["id"]


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(relay_store) -> None:
    for content in ("one", "two"):
        await relay_store.save_message(sender_id="u1", receiver_id="u2", content=content, message_type="text")
    await relay_store.save_message(sender_id="u2", receiver_id="u1", content="reply", message_type="text")

    assert await relay_store.mark_read(sender_id="u1", reader_id="u2") == 2
    assert await relay_store.mark_read(sender_id="u1", reader_id="u2") == 0
    assert await relay_store.mark_read(sender_id="u2", reader_id="u1") == 1


@pytest.mark.asyncio
async def test_record_call(relay_store, db_session) -> None:
    record_id = await relay_store.record_call(
        caller_id="u1", receiver_id="u2", call_type="audio", call_status="rejected"
    )

    record = db_session.get(CallLog, record_id)
    assert record.call_status == "rejected"
    assert record.start_time is not None
    assert record.end_time is None


@pytest.mark.asyncio
async def test_friend_identities(relay_store, db_session, alice, bob, carol) -> None:
    alice.friends.append(bob)
    bob.friends.append(alice)
    db_session.commit()

    assert await relay_store.friend_identities("alice") == {"bob"}
    assert await relay_store.friend_identities("carol") == set()
    assert await relay_store.friend_identities("nobody") == set()


@pytest.mark.asyncio
async def test_database_errors_become_storage_failures(mocker) -> None:
    broken = mocker.MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("disk I/O error")))
    store = RelayStore(broken)

    with pytest.raises(StorageFailure):
        await store.mark_read(sender_id="u1", reader_id="u2")
