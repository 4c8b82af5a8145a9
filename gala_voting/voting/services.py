"""Mutation service: the only write path for categories, nominees, votes and
settings.

Every operation runs in one transaction and, only once that transaction has
committed, records an audit entry and then publishes exactly one change event
(in that order). Operations never raise for expected failures; they return a
``MutationResult`` whose ``error_kind`` the REST layer maps to a status code.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import validate_slug
from django.db import DatabaseError
from django.db import IntegrityError
from django.db import transaction
from django.utils import timezone

from gala_voting.audit import recorder as audit
from gala_voting.audit.recorder import AuditRecorder
from gala_voting.realtime.events import CategoryCreated
from gala_voting.realtime.events import CategoryDeleted
from gala_voting.realtime.events import CategoryUpdated
from gala_voting.realtime.events import ChangeEvent
from gala_voting.realtime.events import NomineeAdded
from gala_voting.realtime.events import NomineeDeleted
from gala_voting.realtime.events import NomineePhotoDeleted
from gala_voting.realtime.events import NomineePhotoUpdated
from gala_voting.realtime.events import NomineeUpdated
from gala_voting.realtime.events import SettingUpdated
from gala_voting.realtime.events import VoteCast
from gala_voting.realtime.hub import BroadcastHub
from gala_voting.voting.exceptions import Conflict
from gala_voting.voting.exceptions import Internal
from gala_voting.voting.exceptions import InvalidInput
from gala_voting.voting.exceptions import MutationError
from gala_voting.voting.exceptions import NotFound
from gala_voting.voting.exceptions import VotingClosed
from gala_voting.voting.models import VOTING_END_DATE
from gala_voting.voting.models import VOTING_ENABLED
from gala_voting.voting.models import Category
from gala_voting.voting.models import Nominee
from gala_voting.voting.models import SystemSetting
from gala_voting.voting.models import Vote
from gala_voting.voting.queries import parse_end_date
from gala_voting.voting.queries import voting_status
from gala_voting.voting.tasks import schedule_photo_removal

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("title", "description", "icon", "is_award", "display_order")
NOMINEE_FIELDS = ("name", "description", "display_order")


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    data: Any = None
    error: MutationError | None = None

    @property
    def error_kind(self) -> str | None:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""


@dataclass(frozen=True)
class Origin:
    """Who asked for a change and from where; copied into the audit entry."""

    actor_id: int | None = None
    ip_address: str = ""
    user_agent: str = ""


ANONYMOUS = Origin()


def mutation(func: Callable[..., Any]) -> Callable[..., MutationResult]:
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> MutationResult:
        try:
            data = func(*args, **kwargs)
        except MutationError as exc:
            logger.info("%s rejected: %s (%s)", func.__name__, exc.message, exc.kind)
            return MutationResult(ok=False, error=exc)
        except DatabaseError:
            logger.exception("%s failed", func.__name__)
            return MutationResult(ok=False, error=Internal())
        return MutationResult(ok=True, data=data)

    return wrapper


# Input coercion


def _required_text(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if not isinstance(value, str) or not value.strip():
        msg = f"{name} is required"
        raise InvalidInput(msg)
    return value.strip()


def _optional_text(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{name} must be a string"
        raise InvalidInput(msg)
    return value.strip()


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool):
        msg = f"{name} must be an integer"
        raise InvalidInput(msg)
    try:
        return int(value)
    except (TypeError, ValueError):
        msg = f"{name} must be an integer"
        raise InvalidInput(msg) from None


def _boolean(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in {"true", "false", "1", "0"}:
        return value.lower() in {"true", "1"}
    if isinstance(value, int) and value in {0, 1}:
        return bool(value)
    msg = f"{name} must be a boolean"
    raise InvalidInput(msg)


def _clean_category_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for name in CATEGORY_FIELDS:
        if name not in changes:
            continue
        if name in {"title", "description", "icon"}:
            cleaned[name] = _required_text(changes, name)
        elif name == "is_award":
            cleaned[name] = _boolean(changes[name], name)
        else:
            cleaned[name] = _integer(changes[name], name)
    return cleaned


def _clean_nominee_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for name in NOMINEE_FIELDS:
        if name not in changes:
            continue
        if name == "name":
            cleaned[name] = _required_text(changes, name)
        elif name == "description":
            cleaned[name] = _optional_text(changes, name)
        else:
            cleaned[name] = _integer(changes[name], name)
    return cleaned


class MutationService:
    def __init__(
        self,
        hub: BroadcastHub,
        recorder: AuditRecorder | None = None,
        *,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.hub = hub
        self.recorder = recorder if recorder is not None else AuditRecorder()
        self._clock = clock

    # Plumbing

    def _after_commit(  # noqa: PLR0913
        self,
        origin: Origin,
        action: str,
        table_name: str,
        record_id: object,
        before: dict | None,
        after: dict | None,
        event: ChangeEvent,
        *,
        admin_only: bool = False,
    ) -> None:
        def record() -> None:
            self.recorder.record(
                origin.actor_id,
                action,
                table_name,
                record_id,
                before,
                after,
                origin.ip_address,
            )

        def publish() -> None:
            if admin_only:
                self.hub.publish_admin(event)
            else:
                self.hub.publish(event)

        transaction.on_commit(record, robust=True)
        transaction.on_commit(publish, robust=True)

    def _active_category(self, category_id: str, *, lock: bool = False) -> Category:
        qs = Category.objects.filter(pk=category_id, is_active=True)
        if lock:
            qs = qs.select_for_update()
        category = qs.first()
        if category is None:
            msg = "Category not found"
            raise NotFound(msg)
        return category

    def _active_nominee(self, nominee_id: Any, *, category_id: str | None = None) -> Nominee:
        nominee_id = _integer(nominee_id, "nominee_id")
        qs = Nominee.objects.select_for_update().filter(pk=nominee_id, is_active=True)
        if category_id is not None:
            qs = qs.filter(category_id=category_id)
        nominee = qs.first()
        if nominee is None:
            msg = "Nominee not found"
            raise NotFound(msg)
        return nominee

    # Categories

    @mutation
    def create_category(self, fields: Mapping[str, Any], origin: Origin = ANONYMOUS) -> dict:
        category_id = _required_text(fields, "id")
        try:
            validate_slug(category_id)
        except ValidationError:
            msg = "id may only contain letters, numbers, underscores or hyphens"
            raise InvalidInput(msg) from None
        title = _required_text(fields, "title")
        description = _required_text(fields, "description")
        icon = _required_text(fields, "icon")
        extra = _clean_category_changes(
            {k: v for k, v in fields.items() if k in {"is_award", "display_order"}},
        )

        with transaction.atomic():
            if Category.objects.filter(pk=category_id).exists():
                msg = "Category ID already exists"
                raise Conflict(msg)
            now = self._clock()
            try:
                with transaction.atomic():
                    category = Category.objects.create(
                        id=category_id,
                        title=title,
                        description=description,
                        icon=icon,
                        created_at=now,
                        updated_at=now,
                        **extra,
                    )
            except IntegrityError:
                # Lost a race with a concurrent create of the same id.
                msg = "Category ID already exists"
                raise Conflict(msg) from None

            snapshot = category.snapshot()
            self._after_commit(
                origin,
                audit.CREATE,
                "categories",
                category.pk,
                None,
                snapshot,
                CategoryCreated(
                    category_id=category.pk,
                    title=category.title,
                    description=category.description,
                    icon=category.icon,
                    is_award=category.is_award,
                    display_order=category.display_order,
                ),
            )
        return snapshot

    @mutation
    def update_category(
        self,
        category_id: str,
        changes: Mapping[str, Any],
        origin: Origin = ANONYMOUS,
    ) -> dict:
        cleaned = _clean_category_changes(changes)
        with transaction.atomic():
            category = self._active_category(category_id, lock=True)
            before = category.snapshot()
            for name, value in cleaned.items():
                setattr(category, name, value)
            category.updated_at = self._clock()
            category.save(update_fields=[*cleaned, "updated_at"])

            diff = {**cleaned, "updated_at": category.updated_at.isoformat()}
            self._after_commit(
                origin,
                audit.UPDATE,
                "categories",
                category.pk,
                before,
                diff,
                CategoryUpdated(category_id=category.pk, changes=diff),
            )
        return category.snapshot()

    @mutation
    def delete_category(self, category_id: str, origin: Origin = ANONYMOUS) -> dict:
        """Deactivate the category and every nominee in it, atomically."""
        with transaction.atomic():
            category = self._active_category(category_id, lock=True)
            before = category.snapshot()
            now = self._clock()
            category.is_active = False
            category.updated_at = now
            category.save(update_fields=["is_active", "updated_at"])
            deactivated = Nominee.objects.filter(category=category, is_active=True).update(
                is_active=False,
                updated_at=now,
            )

            self._after_commit(
                origin,
                audit.DELETE,
                "categories",
                category.pk,
                before,
                {"is_active": False, "nominees_deactivated": deactivated},
                CategoryDeleted(category_id=category.pk),
            )
        return {"id": category.pk, "nominees_deactivated": deactivated}

    # Nominees

    @mutation
    def add_nominee(
        self,
        category_id: str,
        fields: Mapping[str, Any],
        origin: Origin = ANONYMOUS,
    ) -> dict:
        name = _required_text(fields, "name")
        extra = _clean_nominee_changes(
            {k: v for k, v in fields.items() if k in {"description", "display_order"}},
        )
        with transaction.atomic():
            # Lock the category so a concurrent delete cannot leave an
            # active nominee behind in an inactive category.
            category = self._active_category(category_id, lock=True)
            now = self._clock()
            nominee = Nominee.objects.create(
                category=category,
                name=name,
                created_at=now,
                updated_at=now,
                **extra,
            )

            snapshot = nominee.snapshot()
            self._after_commit(
                origin,
                audit.CREATE,
                "nominees",
                nominee.pk,
                None,
                snapshot,
                NomineeAdded(
                    nominee_id=nominee.pk,
                    category_id=category.pk,
                    nominee_name=nominee.name,
                    description=nominee.description,
                    display_order=nominee.display_order,
                ),
            )
        return snapshot

    @mutation
    def update_nominee(
        self,
        category_id: str,
        nominee_id: Any,
        changes: Mapping[str, Any],
        origin: Origin = ANONYMOUS,
    ) -> dict:
        cleaned = _clean_nominee_changes(changes)
        with transaction.atomic():
            nominee = self._active_nominee(nominee_id, category_id=category_id)
            before = nominee.snapshot()
            for name, value in cleaned.items():
                setattr(nominee, name, value)
            nominee.updated_at = self._clock()
            nominee.save(update_fields=[*cleaned, "updated_at"])

            diff = {**cleaned, "updated_at": nominee.updated_at.isoformat()}
            self._after_commit(
                origin,
                audit.UPDATE,
                "nominees",
                nominee.pk,
                before,
                diff,
                NomineeUpdated(
                    nominee_id=nominee.pk,
                    category_id=nominee.category_id,
                    changes=diff,
                ),
            )
        return nominee.snapshot()

    @mutation
    def delete_nominee(
        self,
        category_id: str,
        nominee_id: Any,
        origin: Origin = ANONYMOUS,
    ) -> dict:
        """Deactivate the nominee and permanently remove the votes it received."""
        with transaction.atomic():
            nominee = self._active_nominee(nominee_id, category_id=category_id)
            before = nominee.snapshot()
            nominee.is_active = False
            nominee.updated_at = self._clock()
            nominee.save(update_fields=["is_active", "updated_at"])
            votes_removed, _ = Vote.objects.filter(nominee=nominee).delete()

            self._after_commit(
                origin,
                audit.DELETE,
                "nominees",
                nominee.pk,
                before,
                {"is_active": False, "votes_removed": votes_removed},
                NomineeDeleted(nominee_id=nominee.pk, category_id=nominee.category_id),
            )
        return {"id": nominee.pk, "category_id": nominee.category_id, "votes_removed": votes_removed}

    @mutation
    def set_nominee_photo(
        self,
        nominee_id: Any,
        photo: str,
        origin: Origin = ANONYMOUS,
    ) -> dict:
        """Point the nominee at an already-stored photo.

        The file it replaces is removed in the background after commit.
        """
        if not isinstance(photo, str) or not photo.strip():
            msg = "No photo provided"
            raise InvalidInput(msg)
        with transaction.atomic():
            nominee = self._active_nominee(nominee_id)
            previous = nominee.photo
            nominee.photo = photo.strip()
            nominee.updated_at = self._clock()
            nominee.save(update_fields=["photo", "updated_at"])

            self._after_commit(
                origin,
                audit.PHOTO_UPLOAD,
                "nominees",
                nominee.pk,
                {"photo": previous},
                {"photo": nominee.photo},
                NomineePhotoUpdated(nominee_id=nominee.pk, photo_url=nominee.photo_url),
            )
            if previous and previous != nominee.photo:
                transaction.on_commit(lambda: schedule_photo_removal(previous))
        return {"nominee_id": nominee.pk, "photo_url": nominee.photo_url}

    @mutation
    def clear_nominee_photo(self, nominee_id: Any, origin: Origin = ANONYMOUS) -> dict:
        with transaction.atomic():
            nominee = self._active_nominee(nominee_id)
            previous = nominee.photo
            if not previous:
                msg = "Photo not found"
                raise NotFound(msg)
            nominee.photo = ""
            nominee.updated_at = self._clock()
            nominee.save(update_fields=["photo", "updated_at"])

            self._after_commit(
                origin,
                audit.PHOTO_DELETE,
                "nominees",
                nominee.pk,
                {"photo": previous},
                {"photo": None},
                NomineePhotoDeleted(nominee_id=nominee.pk),
            )
            transaction.on_commit(lambda: schedule_photo_removal(previous))
        return {"nominee_id": nominee.pk}

    # Votes

    @mutation
    def cast_vote(
        self,
        session_id: Any,
        category_id: Any,
        nominee_id: Any,
        origin: Origin = ANONYMOUS,
    ) -> dict:
        """Record or replace the session's choice in the category.

        The (session, category) uniqueness is enforced by the database; two
        concurrent first votes from one session collapse into one row.
        """
        fields = {"session_id": session_id, "category_id": category_id}
        session_id = _required_text(fields, "session_id")
        category_id = _required_text(fields, "category_id")
        if nominee_id in (None, ""):
            msg = "nominee_id is required"
            raise InvalidInput(msg)
        nominee_id = _integer(nominee_id, "nominee_id")

        now = self._clock()
        status = voting_status(now)
        if not status.is_open:
            raise VotingClosed(status.reason)

        with transaction.atomic():
            category = self._active_category(category_id)
            # Locks the nominee row, serialising with delete_nominee.
            nominee = self._active_nominee(nominee_id, category_id=category.pk)
            previous = (
                Vote.objects.filter(session_id=session_id, category=category)
                .values_list("nominee_id", flat=True)
                .first()
            )
            Vote.objects.bulk_create(
                [
                    Vote(
                        session_id=session_id,
                        category=category,
                        nominee=nominee,
                        ip_address=origin.ip_address or "",
                        user_agent=origin.user_agent or "",
                        created_at=now,
                        updated_at=now,
                    ),
                ],
                update_conflicts=True,
                unique_fields=["session_id", "category"],
                update_fields=["nominee", "updated_at"],
            )

            self._after_commit(
                origin,
                audit.VOTE_CAST if previous is None else audit.VOTE_CHANGED,
                "votes",
                f"{session_id}:{category.pk}",
                None if previous is None else {"nominee_id": previous},
                {"nominee_id": nominee.pk},
                VoteCast(category_id=category.pk, nominee_id=nominee.pk, session_id=session_id),
            )
        return {
            "category_id": category.pk,
            "nominee_id": nominee.pk,
            "session_id": session_id,
            "changed": previous is not None and previous != nominee.pk,
        }

    # Settings

    @mutation
    def update_setting(self, key: str, value: Any, origin: Origin = ANONYMOUS) -> dict:
        if not isinstance(value, str | bool | int):
            msg = "value must be a string"
            raise InvalidInput(msg)
        if isinstance(value, bool):
            value = "true" if value else "false"
        value = str(value).strip()
        if key == VOTING_ENABLED and value.lower() not in {"true", "false"}:
            msg = "voting_enabled must be true or false"
            raise InvalidInput(msg)
        if key == VOTING_END_DATE and value and parse_end_date(value) is None:
            msg = "voting_end_date must be an ISO 8601 date-time"
            raise InvalidInput(msg)

        with transaction.atomic():
            setting = SystemSetting.objects.select_for_update().filter(key=key).first()
            if setting is None:
                msg = "Setting not found"
                raise NotFound(msg)
            before = {"value": setting.value}
            setting.value = value
            setting.updated_at = self._clock()
            setting.save(update_fields=["value", "updated_at"])

            self._after_commit(
                origin,
                audit.UPDATE,
                "system_settings",
                setting.key,
                before,
                {"value": setting.value},
                SettingUpdated(key=setting.key, value=setting.value),
                admin_only=True,
            )
        return {"key": setting.key, "value": setting.value}


def get_mutation_service() -> MutationService:
    """Service bound to this process's realtime hub."""
    from gala_voting.realtime.runtime import get_runtime  # noqa: PLC0415

    return MutationService(get_runtime().hub)
