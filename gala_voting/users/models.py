from django.contrib.auth.models import AbstractUser
from django.db.models import CharField
from django.db.models import DateTimeField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _

ROLE_ADMIN = "Admin"


class User(AbstractUser):
    """
    Default custom user model for gala_voting.

    Accounts exist only for administrators; voters are anonymous and are
    identified by a client-generated session id instead.
    """

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Full Name"), blank=True, max_length=255)
    email = EmailField(_("email address"), unique=True)
    # Audit timestamps
    created_at = DateTimeField(auto_now_add=True)
    updated_at = DateTimeField(auto_now=True)

    @property
    def is_gala_admin(self) -> bool:
        """Staff users and members of the Admin group manage the gala."""
        if not self.is_active:
            return False
        if self.is_staff or self.is_superuser:
            return True
        return self.groups.filter(name=ROLE_ADMIN).exists()

    @property
    def role(self) -> str:
        return "admin" if self.is_gala_admin else "user"
