from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditEntry(models.Model):
    """Append-only record of a committed change or a sign-in attempt."""

    action = models.CharField(max_length=50)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    table_name = models.CharField(max_length=100, blank=True)
    # Category ids are slugs, nominee ids are integers; both are stored as text.
    record_id = models.CharField(max_length=255, blank=True)
    before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "audit_log"
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "audit entries"

    def __str__(self) -> str:  # pragma: no cover - trivial
        who = self.actor_id or "system"
        return f"[{self.created_at}] {who}: {self.action} {self.table_name}/{self.record_id}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            msg = "Audit entries are append-only"
            raise ValueError(msg)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        msg = "Audit entries are append-only"
        raise ValueError(msg)
