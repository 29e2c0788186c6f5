"""Outbound delivery shared by the HTTP layer and the realtime gateway."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import socketio

from .presence import PresenceRegistry
from .router import Delivery, EventRouter

logger = logging.getLogger(__name__)


class Notifier:
    """Emits deliveries over Socket.IO and pushes events to identities.

    If the target identity has no live connection, a push is a no-op.
    """

    def __init__(self, server: socketio.AsyncServer, router: EventRouter) -> None:
        self.server = server
        self.router = router

    @property
    def registry(self) -> PresenceRegistry:
        return self.router.registry

    async def emit(self, deliveries: Iterable[Delivery]) -> None:
        """Perform deliveries in order."""
        for delivery in deliveries:
            if delivery.handle is None:
                await self.server.emit(delivery.event, delivery.payload)
                continue
            await self.server.emit(delivery.event, delivery.payload, to=delivery.handle)
            if delivery.close_after:
                await self.server.disconnect(delivery.handle)

    async def notify(self, identity: str, event: str, payload: Any = None) -> bool:
        """Push ``event`` to ``identity``; returns False when it is offline."""
        deliveries = await self.router.deliver_to(identity, event, payload)
        if not deliveries:
            logger.debug("Not notifying offline user %s of %s", identity, event)
            return False
        await self.emit(deliveries)
        return True

    async def refresh_presence(self, *identities: str) -> None:
        """Resend rosters after friendships changed."""
        await self.emit(await self.router.rosters_for(identities))
