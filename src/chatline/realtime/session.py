"""Per-connection state for the realtime layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from chatline.db.time import utcnow


@dataclass
class ConnectionSession:
    """One live realtime connection.

    ``verified_identity`` comes from the connect-time token (``None`` when
    realtime auth is disabled). ``identity`` is bound by the first accepted
    ``user-online`` announcement and is what events are attributed to.
    """

    handle: str
    verified_identity: str | None = None
    identity: str | None = None
    profile: dict[str, Any] = field(default_factory=dict)
    connected_at: datetime = field(default_factory=utcnow)

    @property
    def is_bound(self) -> bool:
        return self.identity is not None

    def may_claim(self, identity: str) -> bool:
        """Return True if this connection may act as ``identity``."""
        if self.verified_identity is not None:
            return identity == self.verified_identity
        return self.identity is None or self.identity == identity

    def bind(self, identity: str, profile: dict[str, Any]) -> None:
        self.identity = identity
        self.profile = dict(profile)
