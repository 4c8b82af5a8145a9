import logging

from celery import shared_task
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


@shared_task(name="voting.remove_photo_file", ignore_result=True)
def remove_photo_file_task(name: str) -> bool:
    """Delete a photo that no nominee references any more."""
    if not name or not default_storage.exists(name):
        return False
    try:
        default_storage.delete(name)
    except OSError:
        logger.warning("Could not remove photo file %s", name, exc_info=True)
        return False
    logger.info("Removed photo file %s", name)
    return True


def schedule_photo_removal(name: str) -> None:
    """Queue ``name`` for removal; a broker outage only leaves an orphan file."""
    try:
        remove_photo_file_task.delay(name)
    except Exception:  # noqa: BLE001
        logger.warning("Could not queue removal of photo file %s", name, exc_info=True)
