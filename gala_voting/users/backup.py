"""JSON snapshot of the gala data for administrators to download."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta

from django.utils import timezone

from gala_voting.audit.models import AuditEntry
from gala_voting.users.models import User
from gala_voting.voting.models import Category
from gala_voting.voting.models import Nominee
from gala_voting.voting.models import SystemSetting
from gala_voting.voting.models import Vote

AUDIT_WINDOW_DAYS = 30


def build_backup(now: datetime | None = None) -> dict:
    now = now or timezone.now()
    users = [
        {
            "id": u.pk,
            "username": u.username,
            "email": u.email,
            "role": u.role,
            "is_active": u.is_active,
            "created_at": u.created_at,
            "updated_at": u.updated_at,
        }
        for u in User.objects.order_by("id")
    ]
    audit_since = now - timedelta(days=AUDIT_WINDOW_DAYS)
    return {
        "timestamp": now.isoformat(),
        # Password hashes never leave the database.
        "users": users,
        "categories": list(Category.objects.order_by("display_order", "id").values()),
        "nominees": list(Nominee.objects.order_by("category_id", "display_order", "id").values()),
        "votes": list(Vote.objects.order_by("id").values()),
        "system_settings": list(SystemSetting.objects.values()),
        "audit_log": list(
            AuditEntry.objects.filter(created_at__gte=audit_since)
            .order_by("-created_at", "-id")
            .values(),
        ),
    }
