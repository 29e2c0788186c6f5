# tests/realtime/test_chat_delivery.py
"""Tests for message relay, typing indicators and read receipts."""

import asyncio

import pytest

from chatline.realtime.router import Delivery


def _message(sender: str, receiver: str, content: str, **extra) -> dict:
    return {"senderId": sender, "receiverId": receiver, "content": content, **extra}


@pytest.mark.asyncio
async def test_message_to_online_receiver(relay, store, connect) -> None:
    u1 = await connect("u1")
    await connect("u2")

    deliveries = await relay.dispatch(u1, "send-message", _message("u1", "u2", "hi", clientId="c-1"))

    assert [(d.handle, d.event) for d in deliveries] == [("sid-u2", "new-message"), ("sid-u1", "message-sent")]
    relayed, echo = deliveries
    assert relayed.payload["id"] == 1
    assert relayed.payload["content"] == "hi"
    assert relayed.payload["isRead"] is False
    assert "clientId" not in relayed.payload
    assert echo.payload["clientId"] == "c-1"
    assert echo.payload["delivered"] is True
    assert echo.payload["id"] == relayed.payload["id"]


@pytest.mark.asyncio
async def test_message_to_offline_receiver_is_still_stored(relay, store, connect) -> None:
    u1 = await connect("u1")

    deliveries = await relay.dispatch(u1, "send-message", _message("u1", "u2", "hi", type="text"))

    assert [(d.handle, d.event) for d in deliveries] == [("sid-u1", "message-sent")]
    assert deliveries[0].payload["delivered"] is False
    assert store.messages[0]["isRead"] is False
    assert store.messages[0]["receiverId"] == "u2"


@pytest.mark.asyncio
async def test_storage_failure_reports_message_error(relay, store, connect) -> None:
    store.fail_messages = True
    u1 = await connect("u1")
    await connect("u2")

    deliveries = await relay.dispatch(u1, "send-message", _message("u1", "u2", "hi", clientId="c-9"))

    assert deliveries == [
        Delivery("sid-u1", "message-error", {"clientId": "c-9", "receiverId": "u2", "error": "storage_failure"})
    ]


@pytest.mark.asyncio
async def test_cannot_send_as_someone_else(relay, store, connect) -> None:
    u1 = await connect("u1")

    deliveries = await relay.dispatch(u1, "send-message", _message("u2", "u1", "spoofed"))

    assert deliveries == [Delivery("sid-u1", "error", {"event": "send-message", "error": "unauthorized"})]
    assert store.messages == []


@pytest.mark.asyncio
async def test_message_validation(relay, connect) -> None:
    u1 = await connect("u1")

    empty = await relay.dispatch(u1, "send-message", _message("u1", "u2", ""))
    bad_type = await relay.dispatch(u1, "send-message", _message("u1", "u2", "x", type="video"))

    assert empty[0].payload["error"] == "invalid_payload"
    assert bad_type[0].payload["error"] == "invalid_payload"


@pytest.mark.asyncio
async def test_concurrent_messages_keep_dispatch_order(relay, store, connect) -> None:
    u1 = await connect("u1")
    await connect("u2")

    results = await asyncio.gather(
        *(relay.dispatch(u1, "send-message", _message("u1", "u2", f"m{index}")) for index in range(10))
    )

    assert [message["content"] for message in store.messages] == [f"m{index}" for index in range(10)]
    relayed_ids = [deliveries[0].payload["id"] for deliveries in results]
    assert relayed_ids == sorted(relayed_ids)
    assert relay.chat._conversation_locks == {}


@pytest.mark.asyncio
async def test_typing_indicators(relay, connect) -> None:
    u1 = await connect("u1")
    await connect("u2")

    typing = await relay.dispatch(u1, "typing", {"senderId": "u1", "receiverId": "u2"})
    stopped = await relay.dispatch(u1, "stop-typing", {"senderId": "u1", "receiverId": "u2"})
    offline = await relay.dispatch(u1, "typing", {"senderId": "u1", "receiverId": "u3"})
    spoofed = await relay.dispatch(u1, "typing", {"senderId": "u2", "receiverId": "u1"})

    assert typing == [Delivery("sid-u2", "typing", {"senderId": "u1"})]
    assert stopped == [Delivery("sid-u2", "stop-typing", {"senderId": "u1"})]
    assert offline == []
    assert spoofed == []


@pytest.mark.asyncio
async def test_mark_read_notifies_once(relay, store, connect) -> None:
    u1 = await connect("u1")
    u2 = await connect("u2")
    await relay.dispatch(u1, "send-message", _message("u1", "u2", "one"))
    await relay.dispatch(u1, "send-message", _message("u1", "u2", "two"))

    first = await relay.dispatch(u2, "mark-read", {"senderId": "u1", "receiverId": "u2"})
    second = await relay.dispatch(u2, "mark-read", {"senderId": "u1", "receiverId": "u2"})

    assert first == [Delivery("sid-u1", "messages-read", {"readerId": "u2"})]
    assert second == []
    assert all(message["isRead"] for message in store.messages)


@pytest.mark.asyncio
async def test_mark_read_only_for_own_inbox(relay, store, connect) -> None:
    u1 = await connect("u1")
    await relay.dispatch(u1, "send-message", _message("u1", "u2", "one"))

    deliveries = await relay.dispatch(u1, "mark-read", {"senderId": "u1", "receiverId": "u2"})

    assert deliveries == [Delivery("sid-u1", "error", {"event": "mark-read", "error": "unauthorized"})]
    assert store.messages[0]["isRead"] is False


@pytest.mark.asyncio
async def test_mark_read_storage_failure(relay, store, connect) -> None:
    u2 = await connect("u2")
    store.fail_messages = True

    deliveries = await relay.dispatch(u2, "mark-read", {"senderId": "u1", "receiverId": "u2"})

    assert deliveries == [
        Delivery("sid-u2", "message-error", {"senderId": "u1", "error": "storage_failure"})
    ]
