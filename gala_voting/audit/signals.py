from django.contrib.auth.signals import user_login_failed
from django.dispatch import receiver

from gala_voting.audit.recorder import LOGIN_FAILED
from gala_voting.audit.recorder import AuditRecorder


@receiver(user_login_failed)
def on_user_login_failed(sender, credentials, request=None, **kwargs):
    ip = request.META.get("REMOTE_ADDR", "") if request is not None else ""
    username = credentials.get("username") or credentials.get("email") or ""
    AuditRecorder().record(
        None,
        LOGIN_FAILED,
        "users",
        username,
        after={"username": username},
        ip_address=ip,
    )
