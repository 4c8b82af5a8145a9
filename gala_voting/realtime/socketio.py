"""Socket.IO server for live gala updates.

Frontend convention:
- URL base: ws://<host>:8000
- Socket.IO path: ``settings.REALTIME_SOCKETIO_PATH`` (``/ws/realtime/``)
- Anyone may connect; no credential is needed to receive public events.
- Admin dashboards either connect with ``query.token`` / ``auth.token`` or
  emit ``join-admin`` with the JWT access token afterwards.

A failed admin join emits nothing back.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import parse_qs

import socketio
from channels.db import database_sync_to_async
from django.conf import settings

from gala_voting.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


def build_server() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=list(settings.CORS_ALLOWED_ORIGINS) or "*",
        logger=False,
        engineio_logger=False,
    )


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Pull a JWT from the handshake query string, falling back to ``auth``.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    return _token_from_data(auth)


def _token_from_data(data: Any) -> str | None:
    # ``join-admin`` clients send either the bare token or ``{"token": ...}``.
    if isinstance(data, str) and data:
        return data
    if isinstance(data, dict):
        token = data.get("token")
        if isinstance(token, str) and token:
            return token
    return None


def register_handlers(sio: socketio.AsyncServer, registry: ConnectionRegistry) -> None:
    admit_admin = database_sync_to_async(registry.admit_admin)

    @sio.event
    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
        registry.connect(sid)
        token = _extract_token(environ, auth)
        if token:
            await admit_admin(sid, token)

    @sio.event
    async def disconnect(sid: str, reason: Any = None):
        registry.disconnect(sid)
        logger.debug("Socket %s disconnected (%s)", sid, reason)

    @sio.on("join-admin")
    async def join_admin(sid: str, data: Any = None):
        await admit_admin(sid, _token_from_data(data))

    @sio.event
    async def ping_health(sid: str, data: Any = None):
        await sio.emit(
            "pong_health",
            {"ok": True, "ts": time.time(), "meta": data},
            to=sid,
        )
