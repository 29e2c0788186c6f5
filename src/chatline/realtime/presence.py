"""Process-local registry of who is online and on which connection."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceEntry:
    """Live binding of an identity to a connection handle."""

    identity: str
    handle: str
    profile: dict[str, Any]


@dataclass(frozen=True)
class Announcement:
    """Outcome of ``PresenceRegistry.announce``."""

    entry: PresenceEntry
    superseded_handle: str | None = None


class PresenceRegistry:
    """Maps identity → live connection handle and profile snapshot.

    Empty at process start and never persisted. At most one entry exists per
    identity; re-announcing from another handle replaces the binding and
    reports the old handle so the caller can retire it. All access goes through
    ``announce``, ``resolve`` and ``remove`` under one lock.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PresenceEntry] = {}
        self._owners: dict[str, str] = {}  # handle -> identity
        self._lock = asyncio.Lock()

    async def announce(
        self,
        identity: str,
        handle: str,
        profile: dict[str, Any] | None = None,
    ) -> Announcement:
        """Register or overwrite the entry for ``identity``."""
        entry = PresenceEntry(identity=identity, handle=handle, profile=dict(profile or {}))
        async with self._lock:
            previous = self._entries.get(identity)
            # A handle owns at most one identity; drop any other binding it held.
            stale_identity = self._owners.get(handle)
            if stale_identity is not None and stale_identity != identity:
                self._entries.pop(stale_identity, None)
            self._entries[identity] = entry
            self._owners[handle] = identity
            superseded = None
            if previous is not None and previous.handle != handle:
                self._owners.pop(previous.handle, None)
                superseded = previous.handle

        if superseded is not None:
            logger.info("User %s reconnected; superseding connection %s", identity, superseded)
        else:
            logger.info("User %s is online", identity)
        return Announcement(entry=entry, superseded_handle=superseded)

    async def resolve(self, identity: str) -> str | None:
        """Return the live handle for ``identity``, or ``None`` if offline."""
        async with self._lock:
            entry = self._entries.get(identity)
        return entry.handle if entry is not None else None

    async def remove(self, handle: str) -> str | None:
        """Remove the entry owned by ``handle``.

        Returns the identity that went offline, or ``None`` if the handle owned
        nothing (already removed, or superseded by a newer connection).
        """
        async with self._lock:
            identity = self._owners.pop(handle, None)
            if identity is None:
                return None
            entry = self._entries.get(identity)
            if entry is None or entry.handle != handle:
                return None
            del self._entries[identity]

        logger.info("User %s disconnected", identity)
        return identity

    async def roster(self, identities: Iterable[str] | None = None) -> list[dict[str, Any]]:
        """Snapshot of online ``{userId, profile}`` pairs, optionally filtered."""
        async with self._lock:
            if identities is None:
                entries = list(self._entries.values())
            else:
                entries = [self._entries[i] for i in identities if i in self._entries]
        return [
            {"userId": entry.identity, "profile": dict(entry.profile)}
            for entry in sorted(entries, key=lambda e: e.identity)
        ]

    async def handles(self) -> dict[str, str]:
        """Snapshot of identity → handle for every online identity."""
        async with self._lock:
            return {identity: entry.handle for identity, entry in self._entries.items()}

    def __len__(self) -> int:
        return len(self._entries)
