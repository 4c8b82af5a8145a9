from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.db import transaction
from django.utils.translation import gettext as _

from gala_voting.users.models import ROLE_ADMIN
from gala_voting.voting.models import SystemSetting


class Command(BaseCommand):
    help = _("Create the Admin group, default settings and optionally an admin user")

    def add_arguments(self, parser):
        parser.add_argument("--username", help="Create or promote this admin user")
        parser.add_argument("--email", default="")
        parser.add_argument("--password", help="Password for a newly created admin user")

    @transaction.atomic
    def handle(self, *args, **options):
        group, _created = Group.objects.get_or_create(name=ROLE_ADMIN)
        added = SystemSetting.ensure_defaults()
        self.stdout.write(f"Default settings added: {added}")

        username = options.get("username")
        if username:
            self._ensure_admin(group, username, options.get("email") or "", options.get("password"))

        self.stdout.write(self.style.SUCCESS("Gala setup complete"))

    def _ensure_admin(self, group, username, email, password):
        user_model = get_user_model()
        user = user_model.objects.filter(username=username).first()
        if user is None:
            if not password:
                msg = "--password is required when creating a new admin user"
                raise CommandError(msg)
            user = user_model.objects.create_user(
                username=username,
                email=email or f"{username}@localhost",
                password=password,
            )
            self.stdout.write(f"Created user {username}")
        user.groups.add(group)
        self.stdout.write(f"{username} is an admin")
