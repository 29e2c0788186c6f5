"""Assembly of the realtime core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from chatline.core.settings import settings

from .calls import CallSessionTracker
from .chat import ChatDelivery
from .presence import PresenceRegistry
from .router import Delivery, EventRouter
from .session import ConnectionSession
from .store import RelayStore


@dataclass
class Relay:
    """Registry, router and the components whose handlers it dispatches to."""

    registry: PresenceRegistry
    router: EventRouter
    calls: CallSessionTracker
    chat: ChatDelivery

    @property
    def events(self) -> tuple[str, ...]:
        return self.router.events

    async def dispatch(self, session: ConnectionSession, event: str, data: Any) -> list[Delivery]:
        return await self.router.dispatch(session, event, data)

    async def disconnect(self, session: ConnectionSession) -> list[Delivery]:
        """Clear presence and close in-flight calls for a closed connection."""
        identity, roster_updates = await self.router.disconnect(session)
        if identity is None:
            return []
        return [*await self.calls.teardown(identity), *roster_updates]


def build_relay(
    store: RelayStore,
    *,
    registry: PresenceRegistry | None = None,
    presence_scope: Literal["friends", "all"] | None = None,
) -> Relay:
    """Wire a registry, router, call tracker and chat delivery around ``store``."""
    registry = registry or PresenceRegistry()
    router = EventRouter(
        registry,
        friends_of=store.friend_identities,
        presence_scope=presence_scope or settings.presence_scope,
    )
    calls = CallSessionTracker(router, store)
    chat = ChatDelivery(router, store)
    calls.install()
    chat.install()
    return Relay(registry=registry, router=router, calls=calls, chat=chat)
