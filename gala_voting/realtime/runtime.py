"""Wiring of the Socket.IO server, connection registry and broadcast hub.

``RealtimeConfig.ready`` builds exactly one runtime per process and hangs it
on the app config; ``config.asgi`` mounts its server and the voting service
layer publishes through its hub. Tests build their own with a fake transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import socketio
from django.apps import apps
from django.conf import settings

from gala_voting.realtime.events import ChangeEvent
from gala_voting.realtime.hub import BroadcastHub
from gala_voting.realtime.hub import Transport
from gala_voting.realtime.registry import ConnectionRegistry
from gala_voting.realtime.registry import Verifier
from gala_voting.realtime.socketio import build_server
from gala_voting.realtime.socketio import register_handlers
from gala_voting.realtime.transport import SocketIOTransport
from gala_voting.users.credentials import verify_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RealtimeRuntime:
    sio: socketio.AsyncServer
    registry: ConnectionRegistry
    hub: BroadcastHub


def _log_event(event: ChangeEvent) -> None:
    logger.info("Publishing %s %s", event.name, event.payload())


def build_runtime(
    *,
    verifier: Verifier = verify_access_token,
    transport: Transport | None = None,
) -> RealtimeRuntime:
    sio = build_server()
    registry = ConnectionRegistry(verifier)
    hub = BroadcastHub(
        registry,
        transport if transport is not None else SocketIOTransport(sio),
        send_timeout=settings.REALTIME_SEND_TIMEOUT,
    )
    register_handlers(sio, registry)
    hub.subscribe(ChangeEvent, _log_event)
    return RealtimeRuntime(sio=sio, registry=registry, hub=hub)


def get_runtime() -> RealtimeRuntime:
    return apps.get_app_config("realtime").runtime
