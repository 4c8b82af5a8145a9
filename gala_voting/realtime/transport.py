from __future__ import annotations

from typing import Any

import socketio


class SocketIOTransport:
    """Delivers hub sends as Socket.IO emits addressed to a single sid."""

    def __init__(self, sio: socketio.AsyncServer):
        self._sio = sio

    async def send(self, sid: str, event: str, payload: dict[str, Any]) -> None:
        await self._sio.emit(event, payload, to=sid)
