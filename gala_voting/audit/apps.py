import importlib

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gala_voting.audit"
    verbose_name = _("Audit")

    def ready(self) -> None:  # pragma: no cover
        importlib.import_module("gala_voting.audit.signals")
        return super().ready()
