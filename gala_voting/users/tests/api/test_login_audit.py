import pytest
from rest_framework import status
from rest_framework.test import APIClient

from gala_voting.audit.models import AuditEntry
from gala_voting.audit.recorder import LOGIN_FAILED
from gala_voting.audit.recorder import LOGIN_SUCCESS

pytestmark = pytest.mark.django_db

TEST_PASSWORD = "password"  # noqa: S105


def test_successful_login_is_audited(admin_user):
    client = APIClient()
    r = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": admin_user.username, "password": TEST_PASSWORD},
        format="json",
        REMOTE_ADDR="10.0.0.7",
    )
    assert r.status_code == status.HTTP_200_OK, r.content
    assert "access" in r.data

    entry = AuditEntry.objects.get(action=LOGIN_SUCCESS)
    assert entry.actor_id == admin_user.pk
    assert entry.after == {"username": admin_user.username, "role": "admin"}
    assert entry.ip_address == "10.0.0.7"


def test_failed_login_is_audited(admin_user):
    client = APIClient()
    r = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": admin_user.username, "password": "wrong"},
        format="json",
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED

    entry = AuditEntry.objects.get(action=LOGIN_FAILED)
    assert entry.actor_id is None
    assert entry.record_id == admin_user.username
    assert not AuditEntry.objects.filter(action=LOGIN_SUCCESS).exists()
