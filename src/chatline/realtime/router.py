"""Dispatch of inbound realtime events and presence fan-out."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

from chatline.schemas.events import UserOnline
from chatline.services.errors import StorageFailure

from .presence import PresenceRegistry
from .session import ConnectionSession

logger = logging.getLogger(__name__)

# Outbound event names
ONLINE_USERS = "online-users"
USER_OFFLINE = "user-offline"
SESSION_REPLACED = "session-replaced"
ERROR = "error"

M = TypeVar("M", bound=BaseModel)

FriendLookup = Callable[[str], Awaitable[set[str]]]


@dataclass(frozen=True)
class Delivery:
    """One outbound emit. ``handle=None`` means every connection."""

    handle: str | None
    event: str
    payload: Any = None
    close_after: bool = False


Handler = Callable[[ConnectionSession, Any], Awaitable[list[Delivery]]]


class EventRouter:
    """Maps event names to handlers and resolves identities to connections.

    Handlers receive the originating session and the raw payload and return the
    deliveries to perform. Delivery is fire-and-forget: an offline target is
    either silently skipped or reported to the origin as ``user-offline``.
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        *,
        friends_of: FriendLookup | None = None,
        presence_scope: Literal["friends", "all"] = "friends",
    ) -> None:
        self.registry = registry
        self._friends_of = friends_of
        self.presence_scope = presence_scope if friends_of is not None else "all"
        self._handlers: dict[str, Handler] = {"user-online": self._on_user_online}

    # -- dispatch table -------------------------------------------------

    def register(self, event: str, handler: Handler) -> None:
        if event in self._handlers:
            raise ValueError(f"Handler already registered for {event!r}")
        self._handlers[event] = handler

    @property
    def events(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    async def dispatch(self, session: ConnectionSession, event: str, data: Any) -> list[Delivery]:
        """Run the handler for ``event`` and return its deliveries."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning("Ignoring unknown realtime event %r from %s", event, session.handle)
            return [self.error(session, event, "unknown_event")]
        if event != "user-online" and not session.is_bound:
            return [self.error(session, event, "not_online")]
        try:
            return await handler(session, data)
        except ValidationError as exc:
            logger.debug("Invalid %s payload from %s: %s", event, session.handle, exc)
            return [self.error(session, event, "invalid_payload")]

    # -- helpers for handlers -------------------------------------------

    @staticmethod
    def parse(model: type[M], data: Any) -> M:
        """Validate a raw payload; ``ValidationError`` becomes an ``error`` event."""
        return model.model_validate(data if data is not None else {})

    @staticmethod
    def error(session: ConnectionSession, event: str, reason: str) -> Delivery:
        return Delivery(session.handle, ERROR, {"event": event, "error": reason})

    def check_actor(self, session: ConnectionSession, claimed: str, event: str) -> Delivery | None:
        """Return an ``unauthorized`` error unless ``claimed`` is the session's identity."""
        if claimed != session.identity:
            logger.warning(
                "Connection %s bound to %s tried to act as %s on %s",
                session.handle, session.identity, claimed, event,
            )
            return self.error(session, event, "unauthorized")
        return None

    async def deliver_to(
        self,
        identity: str,
        event: str,
        payload: Any = None,
        *,
        origin: ConnectionSession | None = None,
    ) -> list[Delivery]:
        """Address ``identity``'s live connection.

        When the identity is offline and ``origin`` is given, the origin gets a
        ``user-offline`` event instead; otherwise the event is dropped.
        """
        handle = await self.registry.resolve(identity)
        if handle is not None:
            return [Delivery(handle, event, payload)]
        logger.debug("Dropping %s for offline user %s", event, identity)
        if origin is not None:
            return [Delivery(origin.handle, USER_OFFLINE, identity)]
        return []

    # -- presence -------------------------------------------------------

    async def _on_user_online(self, session: ConnectionSession, data: Any) -> list[Delivery]:
        # The web client sends the bare identity string.
        if isinstance(data, str):
            data = {"userId": data}
        announcement = self.parse(UserOnline, data)
        if not session.may_claim(announcement.user_id):
            return [self.error(session, "user-online", "unauthorized")]

        session.bind(announcement.user_id, announcement.profile)
        result = await self.registry.announce(session.identity, session.handle, session.profile)

        deliveries: list[Delivery] = []
        if result.superseded_handle is not None:
            deliveries.append(
                Delivery(
                    result.superseded_handle,
                    SESSION_REPLACED,
                    {"userId": announcement.user_id},
                    close_after=True,
                )
            )
        deliveries.extend(await self.presence_changed(announcement.user_id, include_self=True))
        return deliveries

    async def disconnect(self, session: ConnectionSession) -> tuple[str | None, list[Delivery]]:
        """Drop the session's presence entry.

        Returns the identity that went offline (``None`` for a no-op) and the
        roster updates to send.
        """
        identity = await self.registry.remove(session.handle)
        if identity is None:
            return None, []
        return identity, await self.presence_changed(identity)

    async def presence_changed(self, identity: str, *, include_self: bool = False) -> list[Delivery]:
        """Roster updates after ``identity`` came online or went away."""
        if self.presence_scope == "all":
            return [Delivery(None, ONLINE_USERS, await self.registry.roster())]

        viewers = set(await self._load_friends(identity))
        if include_self:
            viewers.add(identity)
        return await self.rosters_for(viewers)

    async def rosters_for(self, viewers: Iterable[str]) -> list[Delivery]:
        """Send each online viewer the online subset of their friends."""
        if self.presence_scope == "all":
            return [Delivery(None, ONLINE_USERS, await self.registry.roster())]

        online = await self.registry.handles()
        deliveries: list[Delivery] = []
        for viewer in sorted(viewers):
            handle = online.get(viewer)
            if handle is None:
                continue
            friends = await self._load_friends(viewer)
            deliveries.append(Delivery(handle, ONLINE_USERS, await self.registry.roster(friends)))
        return deliveries

    async def _load_friends(self, identity: str) -> set[str]:
        if self._friends_of is None:
            return set()
        try:
            return await self._friends_of(identity)
        except StorageFailure:
            logger.exception("Could not load friends of %s for presence update", identity)
            return set()
