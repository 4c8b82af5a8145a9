from unittest import mock

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from gala_voting.voting.tasks import remove_photo_file_task
from gala_voting.voting.tasks import schedule_photo_removal


def test_remove_photo_file():
    name = default_storage.save("nominees/old.png", ContentFile(b"png"))
    assert remove_photo_file_task(name) is True
    assert not default_storage.exists(name)


def test_remove_missing_file():
    assert remove_photo_file_task("nominees/missing.png") is False
    assert remove_photo_file_task("") is False


def test_schedule_runs_task():
    name = default_storage.save("nominees/queued.png", ContentFile(b"png"))
    schedule_photo_removal(name)
    assert not default_storage.exists(name)


def test_schedule_survives_broker_outage(caplog):
    with mock.patch.object(
        remove_photo_file_task,
        "delay",
        side_effect=ConnectionError("broker down"),
    ):
        schedule_photo_removal("nominees/x.png")
    assert "Could not queue removal" in caplog.text
