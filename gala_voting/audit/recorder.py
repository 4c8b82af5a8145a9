"""Best-effort audit trail.

``AuditRecorder.record`` is called after the business change has committed.
A failure here is logged and swallowed: the change already happened and the
caller has been told so, and an audit write cannot undo that.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from gala_voting.audit.models import AuditEntry

logger = logging.getLogger(__name__)

# Actions
CREATE = "CREATE"
UPDATE = "UPDATE"
DELETE = "DELETE"
PHOTO_UPLOAD = "PHOTO_UPLOAD"
PHOTO_DELETE = "PHOTO_DELETE"
VOTE_CAST = "VOTE_CAST"
VOTE_CHANGED = "VOTE_CHANGED"
LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGIN_FAILED = "LOGIN_FAILED"
LOGOUT = "LOGOUT"
BACKUP_CREATED = "BACKUP_CREATED"


class AuditRecorder:
    def record(  # noqa: PLR0913
        self,
        actor_id: int | None,
        action: str,
        table_name: str,
        record_id: object,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        ip_address: str | None = "",
    ) -> AuditEntry | None:
        """Append one audit entry; returns it, or ``None`` if the write failed."""
        try:
            # Savepoint so a failed insert cannot poison an enclosing transaction.
            with transaction.atomic():
                return AuditEntry.objects.create(
                    actor_id=actor_id,
                    action=action,
                    table_name=table_name,
                    record_id="" if record_id is None else str(record_id),
                    before=before,
                    after=after,
                    ip_address=ip_address or "",
                )
        except Exception:
            logger.exception(
                "Audit write failed for %s %s/%s",
                action,
                table_name,
                record_id,
            )
            return None
