import logging
from unittest import mock

import pytest
from django.db import DatabaseError

from gala_voting.audit.models import AuditEntry
from gala_voting.audit.recorder import CREATE
from gala_voting.audit.recorder import DELETE
from gala_voting.audit.recorder import AuditRecorder
from gala_voting.users.models import User


@pytest.mark.django_db
def test_record_writes_entry(admin_user: User):
    entry = AuditRecorder().record(
        admin_user.pk,
        CREATE,
        "categories",
        "best-speaker",
        after={"id": "best-speaker", "title": "Best Speaker"},
        ip_address="127.0.0.1",
    )

    assert entry is not None
    assert entry.actor == admin_user
    assert entry.record_id == "best-speaker"
    assert entry.before is None
    assert AuditEntry.objects.get().after["title"] == "Best Speaker"
    assert str(entry).startswith("[")


@pytest.mark.django_db
def test_record_id_is_stored_as_text():
    entry = AuditRecorder().record(None, DELETE, "nominees", 17)

    assert entry.record_id == "17"
    assert entry.actor is None
    assert entry.ip_address == ""


@pytest.mark.django_db
def test_record_failure_is_logged_and_swallowed(caplog):
    with (
        mock.patch.object(AuditEntry.objects, "create", side_effect=DatabaseError("disk full")),
        caplog.at_level(logging.ERROR, logger="gala_voting.audit.recorder"),
    ):
        entry = AuditRecorder().record(None, CREATE, "categories", "x")

    assert entry is None
    assert "Audit write failed for CREATE categories/x" in caplog.text
    assert not AuditEntry.objects.exists()


@pytest.mark.django_db
def test_entries_are_append_only():
    entry = AuditRecorder().record(None, CREATE, "categories", "x")

    entry.action = DELETE
    with pytest.raises(ValueError, match="append-only"):
        entry.save()
    with pytest.raises(ValueError, match="append-only"):
        entry.delete()
    assert AuditEntry.objects.get().action == CREATE


@pytest.mark.django_db
def test_newest_first_ordering():
    first = AuditRecorder().record(None, CREATE, "categories", "a")
    second = AuditRecorder().record(None, CREATE, "categories", "b")

    assert list(AuditEntry.objects.all()) == [second, first]
