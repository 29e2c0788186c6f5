"""Call lifecycle tracking and WebRTC signaling relay."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from chatline.db.time import utcnow
from chatline.schemas.events import CallAccepted, CallRejected, CallUser, EndCall, SignalRelay
from chatline.services.errors import StorageFailure

from .router import Delivery, EventRouter
from .session import ConnectionSession
from .store import RelayStore

logger = logging.getLogger(__name__)

DEFAULT_CALL_TYPE = "audio"


class CallState(str, Enum):
    RINGING = "ringing"
    ACCEPTED = "accepted"


@dataclass
class TrackedCall:
    """A call that has not reached a terminal outcome yet."""

    caller_id: str
    receiver_id: str
    call_type: str
    state: CallState
    started_at: datetime

    def involves(self, identity: str) -> bool:
        return identity in (self.caller_id, self.receiver_id)

    def peer_of(self, identity: str) -> str:
        return self.receiver_id if identity == self.caller_id else self.caller_id


class CallSessionTracker:
    """Ringing → accepted → ended, or ringing → rejected, per (caller, receiver).

    Only terminal outcomes are written to the call log. A failed write is logged
    and never holds back the signaling event, which is always relayed first.
    """

    def __init__(self, router: EventRouter, store: RelayStore) -> None:
        self.router = router
        self.store = store
        self._calls: dict[tuple[str, str], TrackedCall] = {}
        self._lock = asyncio.Lock()

    def install(self) -> None:
        """Register this tracker's handlers on the router."""
        self.router.register("call-user", self.call_user)
        self.router.register("call-accepted", self.call_accepted)
        self.router.register("call-rejected", self.call_rejected)
        self.router.register("signal", self.signal)
        self.router.register("end-call", self.end_call)

    async def get(self, caller_id: str, receiver_id: str) -> TrackedCall | None:
        async with self._lock:
            return self._calls.get((caller_id, receiver_id))

    async def _pop(self, caller_id: str, receiver_id: str) -> TrackedCall | None:
        async with self._lock:
            return self._calls.pop((caller_id, receiver_id), None)

    async def call_user(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(CallUser, data)
        if (denied := self.router.check_actor(session, event.caller_id, "call-user")) is not None:
            return [denied]

        deliveries = await self.router.deliver_to(
            event.receiver_id,
            "incoming-call",
            {
                "callerId": event.caller_id,
                "callerName": event.caller_name,
                "callerAvatar": event.caller_avatar,
                "callType": event.call_type,
                "signal": None,
            },
            origin=session,
        )
        if deliveries and deliveries[0].event == "incoming-call":
            async with self._lock:
                self._calls[(event.caller_id, event.receiver_id)] = TrackedCall(
                    caller_id=event.caller_id,
                    receiver_id=event.receiver_id,
                    call_type=event.call_type,
                    state=CallState.RINGING,
                    started_at=utcnow(),
                )
            logger.info("Call initiated from %s to %s", event.caller_id, event.receiver_id)
        return deliveries

    async def call_accepted(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(CallAccepted, data)
        receiver_id = session.identity
        if receiver_id is None:
            return [self.router.error(session, "call-accepted", "not_online")]

        async with self._lock:
            call = self._calls.get((event.caller_id, receiver_id))
            if call is None:
                # Accept for a ring we never saw (e.g. after a server restart).
                call = TrackedCall(
                    caller_id=event.caller_id,
                    receiver_id=receiver_id,
                    call_type=DEFAULT_CALL_TYPE,
                    state=CallState.ACCEPTED,
                    started_at=utcnow(),
                )
                self._calls[(event.caller_id, receiver_id)] = call
            call.state = CallState.ACCEPTED

        logger.info("Call from %s accepted by %s", event.caller_id, receiver_id)
        return await self.router.deliver_to(
            event.caller_id, "call-accepted", {"signal": event.signal}, origin=session
        )

    async def call_rejected(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(CallRejected, data)
        if (denied := self.router.check_actor(session, event.receiver_id, "call-rejected")) is not None:
            return [denied]
        deliveries = await self.router.deliver_to(event.caller_id, "call-rejected")

        call = await self._pop(event.caller_id, event.receiver_id)
        logger.info("Call from %s rejected by %s", event.caller_id, event.receiver_id)
        await self._record(
            caller_id=event.caller_id,
            receiver_id=event.receiver_id,
            call_type=event.call_type or (call.call_type if call else DEFAULT_CALL_TYPE),
            call_status="rejected",
            start_time=call.started_at if call else None,
        )
        return deliveries

    async def signal(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(SignalRelay, data)
        return await self.router.deliver_to(
            event.target_id,
            "signal",
            {"senderId": session.identity, "signal": event.signal},
            origin=session,
        )

    async def end_call(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        event = self.router.parse(EndCall, data)
        if session.identity not in (event.caller_id, event.receiver_id):
            return [self.router.error(session, "end-call", "unauthorized")]
        other_id = event.receiver_id if event.caller_id == session.identity else event.caller_id
        deliveries = await self.router.deliver_to(other_id, "call-ended")

        call = await self._pop(event.caller_id, event.receiver_id)
        logger.info("Call between %s and %s ended by %s", event.caller_id, event.receiver_id, session.identity)
        await self._record(
            caller_id=event.caller_id,
            receiver_id=event.receiver_id,
            call_type=event.call_type or (call.call_type if call else DEFAULT_CALL_TYPE),
            call_status="accepted",
            start_time=call.started_at if call else None,
            end_time=utcnow(),
        )
        return deliveries

    async def teardown(self, identity: str) -> list[Delivery]:
        """Close every call ``identity`` is part of after it went offline.

        A ringing call counts as canceled when the caller left and missed when
        the receiver left; an accepted call is logged as a completed call.
        """
        async with self._lock:
            orphaned = [key for key, call in self._calls.items() if call.involves(identity)]
            calls = [self._calls.pop(key) for key in orphaned]

        deliveries: list[Delivery] = []
        for call in calls:
            peer = call.peer_of(identity)
            deliveries.extend(
                await self.router.deliver_to(
                    peer, "call-ended", {"peerId": identity, "reason": "disconnected"}
                )
            )
            if call.state is CallState.ACCEPTED:
                status, end_time = "accepted", utcnow()
            elif identity == call.caller_id:
                status, end_time = "canceled", None
            else:
                status, end_time = "missed", None
            logger.info(
                "Call between %s and %s closed as %s after %s disconnected",
                call.caller_id, call.receiver_id, status, identity,
            )
            await self._record(
                caller_id=call.caller_id,
                receiver_id=call.receiver_id,
                call_type=call.call_type,
                call_status=status,
                start_time=call.started_at,
                end_time=end_time,
            )
        return deliveries

    async def _record(self, **fields: Any) -> None:
        try:
            await self.store.record_call(**fields)
        except StorageFailure:
            logger.exception(
                "Error logging %s call from %s to %s",
                fields.get("call_status"), fields.get("caller_id"), fields.get("receiver_id"),
            )
