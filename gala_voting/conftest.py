from datetime import timedelta

import pytest
from django.contrib.auth.models import Group
from django.utils import timezone

from gala_voting.realtime.hub import BroadcastHub
from gala_voting.realtime.registry import ConnectionRegistry
from gala_voting.realtime.tests.fakes import RecordingTransport
from gala_voting.realtime.tests.fakes import fake_verifier
from gala_voting.users.models import ROLE_ADMIN
from gala_voting.users.models import User
from gala_voting.voting.models import VOTING_ENABLED
from gala_voting.voting.models import VOTING_END_DATE
from gala_voting.voting.models import Category
from gala_voting.voting.models import Nominee
from gala_voting.voting.models import SystemSetting
from gala_voting.voting.services import MutationService

TEST_PASSWORD = "password"  # noqa: S105


@pytest.fixture
def user(db) -> User:
    return User.objects.create_user(
        username="voter",
        email="voter@example.com",
        password=TEST_PASSWORD,
    )


@pytest.fixture
def admin_user(db) -> User:
    admin = User.objects.create_user(
        username="gala-admin",
        email="admin@example.com",
        password=TEST_PASSWORD,
    )
    group, _ = Group.objects.get_or_create(name=ROLE_ADMIN)
    admin.groups.add(group)
    return admin


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def registry():
    return ConnectionRegistry(fake_verifier)


@pytest.fixture
def hub(registry, transport):
    return BroadcastHub(registry, transport, send_timeout=0.05)


@pytest.fixture
def service(hub):
    return MutationService(hub)


@pytest.fixture
def voting_open(db):
    SystemSetting.objects.update_or_create(key=VOTING_ENABLED, defaults={"value": "true"})
    SystemSetting.objects.update_or_create(
        key=VOTING_END_DATE,
        defaults={"value": (timezone.now() + timedelta(days=1)).isoformat()},
    )


@pytest.fixture
def category(db) -> Category:
    return Category.objects.create(
        id="best-speaker",
        title="Best Speaker",
        icon="mic",
        display_order=1,
    )


@pytest.fixture
def nominee(category) -> Nominee:
    return Nominee.objects.create(category=category, name="Alice")
