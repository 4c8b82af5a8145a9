"""Fan-out of change events to live connections.

``publish`` and ``publish_admin`` are fire-and-forget from the caller's point
of view: they never raise because of a delivery problem. Every send is bounded
by ``send_timeout`` and runs concurrently with the others, so one dead or
stalled client cannot hold up the rest.

Both are synchronous and meant to be called from Django's sync code paths
(typically a ``transaction.on_commit`` callback). Async callers use
``apublish`` / ``apublish_admin`` instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import Protocol
from typing import TypeVar

from asgiref.sync import async_to_sync

from gala_voting.realtime.events import ChangeEvent
from gala_voting.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=ChangeEvent)


class Transport(Protocol):
    async def send(self, sid: str, event: str, payload: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class DeliveryReport:
    event: str
    delivered: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


class BroadcastHub:
    def __init__(
        self,
        registry: ConnectionRegistry,
        transport: Transport,
        *,
        send_timeout: float = 2.0,
    ):
        self.registry = registry
        self._transport = transport
        self._send_timeout = send_timeout
        self._subscribers: dict[type[ChangeEvent], list[Callable[[Any], None]]] = (
            defaultdict(list)
        )

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Register an in-process handler; returns a callable that removes it.

        Subscribing to ``ChangeEvent`` receives every event.
        """
        self._subscribers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> DeliveryReport:
        """Deliver ``event`` to every open connection."""
        self._notify_subscribers(event)
        return self._deliver(self.registry.connection_ids(), event)

    def publish_admin(self, event: ChangeEvent) -> DeliveryReport:
        """Deliver ``event`` only to connections admitted to the admin group."""
        self._notify_subscribers(event)
        return self._deliver(self.registry.admin_connection_ids(), event)

    async def apublish(self, event: ChangeEvent) -> DeliveryReport:
        self._notify_subscribers(event)
        return await self._fan_out(self.registry.connection_ids(), event)

    async def apublish_admin(self, event: ChangeEvent) -> DeliveryReport:
        self._notify_subscribers(event)
        return await self._fan_out(self.registry.admin_connection_ids(), event)

    def _notify_subscribers(self, event: ChangeEvent) -> None:
        for event_type in type(event).__mro__:
            for handler in list(self._subscribers.get(event_type, ())):
                try:
                    handler(event)
                except Exception:
                    logger.exception("Subscriber %r failed on %s", handler, event.name)

    def _deliver(self, sids: tuple[str, ...], event: ChangeEvent) -> DeliveryReport:
        if not sids:
            return DeliveryReport(event=event.name)
        try:
            return async_to_sync(self._fan_out)(sids, event)
        except Exception:
            logger.exception("Broadcast of %s failed", event.name)
            return DeliveryReport(event=event.name, failed=sids)

    async def _fan_out(self, sids: tuple[str, ...], event: ChangeEvent) -> DeliveryReport:
        payload = event.payload()
        outcomes = await asyncio.gather(
            *(self._send_one(sid, event.name, payload) for sid in sids),
        )
        delivered = tuple(sid for sid, ok in zip(sids, outcomes, strict=True) if ok)
        failed = tuple(sid for sid, ok in zip(sids, outcomes, strict=True) if not ok)
        logger.debug(
            "Broadcast %s: %d delivered, %d failed",
            event.name,
            len(delivered),
            len(failed),
        )
        return DeliveryReport(event=event.name, delivered=delivered, failed=failed)

    async def _send_one(self, sid: str, name: str, payload: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(
                self._transport.send(sid, name, payload),
                timeout=self._send_timeout,
            )
        except TimeoutError:
            logger.warning("Send of %s to %s timed out", name, sid)
            return False
        except Exception:
            logger.exception("Send of %s to %s failed", name, sid)
            return False
        return True
