from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RealtimeConfig(AppConfig):
    name = "gala_voting.realtime"
    label = "realtime"
    verbose_name = _("Realtime")

    def ready(self):
        from gala_voting.realtime.runtime import build_runtime  # noqa: PLC0415

        self.runtime = build_runtime()
