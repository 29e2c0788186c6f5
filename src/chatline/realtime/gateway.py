"""Socket.IO server for the web client.

The client uses ``socket.io-client`` with:
- server URL: the API host
- ``path``: ``/socket.io`` (``SOCKETIO_PATH``)
- ``query.token`` or ``auth.token``: the identity provider's access token

Every inbound event is handed to the relay; the deliveries it returns are
emitted here. Nothing below this module knows about Socket.IO.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qs

import socketio

from chatline.core.security import InvalidTokenError, verify_access_token
from chatline.core.settings import settings

from .notifier import Notifier
from .relay import build_relay
from .session import ConnectionSession
from .store import RelayStore

logger = logging.getLogger(__name__)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.socketio_cors_origins,
    logger=False,
    engineio_logger=False,
)

relay = build_relay(RelayStore())
notifier = Notifier(sio, relay.router)

_sessions: dict[str, ConnectionSession] = {}


def get_notifier() -> Notifier:
    """Return the process-wide notifier (FastAPI dependency)."""
    return notifier


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Return the token from the ``auth`` payload, else from ``?token=``."""
    if isinstance(auth, dict) and isinstance(auth.get("token"), str) and auth["token"]:
        return auth["token"]
    tokens = parse_qs(environ.get("QUERY_STRING", "")).get("token")
    return tokens[0] if tokens and tokens[0] else None


def authenticate(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Return the verified identity for a connection attempt.

    Raises:
        socketio.exceptions.ConnectionRefusedError: If a token is required but missing or invalid.
    """
    token = _extract_token(environ, auth)
    if not token:
        if settings.realtime_require_auth:
            raise socketio.exceptions.ConnectionRefusedError("unauthorized")
        return None

    try:
        return verify_access_token(token)
    except InvalidTokenError as exc:
        if "expired" in str(exc).lower():
            raise socketio.exceptions.ConnectionRefusedError("jwt_expired") from exc
        raise socketio.exceptions.ConnectionRefusedError("unauthorized") from exc


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    identity = authenticate(environ, auth)
    _sessions[sid] = ConnectionSession(handle=sid, verified_identity=identity)
    logger.debug("New socket connection %s (identity=%s)", sid, identity)


@sio.event
async def disconnect(sid: str, reason: Any = None):
    session = _sessions.pop(sid, None)
    if session is None:
        return
    await notifier.emit(await relay.disconnect(session))


def _make_handler(event: str) -> Callable[[str, Any], Awaitable[None]]:
    async def handler(sid: str, data: Any = None) -> None:
        session = _sessions.get(sid)
        if session is None:
            logger.debug("Dropping %s from unknown connection %s", event, sid)
            return
        await notifier.emit(await relay.dispatch(session, event, data))

    handler.__name__ = f"on_{event.replace('-', '_')}"
    return handler


for _event in relay.events:
    sio.on(_event, handler=_make_handler(_event))
