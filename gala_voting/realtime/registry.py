"""Live connection bookkeeping.

A connection is in exactly one of three states. Admin membership is only
granted after the credential verifier accepts a token with the admin role;
anything else is a silent denial: the connection stays where it was and the
client is told nothing.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime

from django.utils import timezone

from gala_voting.users.credentials import Credential

logger = logging.getLogger(__name__)

Verifier = Callable[[str | None], Credential]


class ConnectionState(enum.StrEnum):
    CONNECTED_ANONYMOUS = "connected-anonymous"
    CONNECTED_ADMIN = "connected-admin"
    DISCONNECTED = "disconnected"


@dataclass
class Connection:
    sid: str
    state: ConnectionState = ConnectionState.CONNECTED_ANONYMOUS
    user_id: int | None = None
    connected_at: datetime = field(default_factory=timezone.now)


class ConnectionRegistry:
    def __init__(self, verifier: Verifier):
        self._verifier = verifier
        self._lock = threading.Lock()
        self._connections: dict[str, Connection] = {}

    def connect(self, sid: str) -> Connection:
        with self._lock:
            conn = Connection(sid=sid)
            self._connections[sid] = conn
        logger.debug("Connection %s opened", sid)
        return conn

    def disconnect(self, sid: str) -> None:
        with self._lock:
            conn = self._connections.pop(sid, None)
        if conn is not None:
            conn.state = ConnectionState.DISCONNECTED
            logger.debug("Connection %s closed", sid)

    def admit_admin(self, sid: str, token: str | None) -> bool:
        """Promote ``sid`` to the admin group if ``token`` verifies as admin.

        Returns whether the connection is an admin afterwards. Verification
        runs outside the lock because it hits the database.
        """
        if self.state_of(sid) is ConnectionState.DISCONNECTED:
            logger.info("Admin join from unknown connection %s ignored", sid)
            return False

        credential = self._verifier(token)
        if not credential.is_admin:
            logger.info(
                "Admin join denied for %s (valid=%s, role=%s)",
                sid,
                credential.valid,
                credential.role,
            )
            return self.state_of(sid) is ConnectionState.CONNECTED_ADMIN

        with self._lock:
            conn = self._connections.get(sid)
            if conn is None:
                # Disconnected while the token was being verified.
                return False
            conn.state = ConnectionState.CONNECTED_ADMIN
            conn.user_id = credential.user_id
        logger.info("Connection %s joined admin group (user %s)", sid, credential.user_id)
        return True

    def state_of(self, sid: str) -> ConnectionState:
        with self._lock:
            conn = self._connections.get(sid)
            return conn.state if conn is not None else ConnectionState.DISCONNECTED

    def connection_ids(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._connections)

    def admin_connection_ids(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(
                sid
                for sid, conn in self._connections.items()
                if conn.state is ConnectionState.CONNECTED_ADMIN
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
