"""Change events pushed to connected clients.

Every mutation produces exactly one of these. Each class carries its wire
name and builds a flat payload holding the affected entity's id and the
changed fields only; clients merge them idempotently by entity id.

Event names are part of the client contract and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import ClassVar


@dataclass(frozen=True)
class ChangeEvent:
    name: ClassVar[str] = ""

    def payload(self) -> dict[str, Any]:
        raise NotImplementedError


# Categories


@dataclass(frozen=True)
class CategoryCreated(ChangeEvent):
    name: ClassVar[str] = "category-created"

    category_id: str
    title: str
    description: str
    icon: str
    is_award: bool
    display_order: int

    def payload(self) -> dict[str, Any]:
        return {
            "id": self.category_id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "is_award": self.is_award,
            "display_order": self.display_order,
        }


@dataclass(frozen=True)
class CategoryUpdated(ChangeEvent):
    name: ClassVar[str] = "category-updated"

    category_id: str
    changes: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {**self.changes, "id": self.category_id}


@dataclass(frozen=True)
class CategoryDeleted(ChangeEvent):
    name: ClassVar[str] = "category-deleted"

    category_id: str

    def payload(self) -> dict[str, Any]:
        return {"id": self.category_id}


# Nominees


@dataclass(frozen=True)
class NomineeAdded(ChangeEvent):
    name: ClassVar[str] = "nominee-added"

    nominee_id: int
    category_id: str
    nominee_name: str
    description: str
    display_order: int

    def payload(self) -> dict[str, Any]:
        return {
            "id": self.nominee_id,
            "category_id": self.category_id,
            "name": self.nominee_name,
            "description": self.description,
            "display_order": self.display_order,
        }


@dataclass(frozen=True)
class NomineeUpdated(ChangeEvent):
    name: ClassVar[str] = "nominee-updated"

    nominee_id: int
    category_id: str
    changes: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {**self.changes, "id": self.nominee_id, "category_id": self.category_id}


@dataclass(frozen=True)
class NomineeDeleted(ChangeEvent):
    name: ClassVar[str] = "nominee-deleted"

    nominee_id: int
    category_id: str

    def payload(self) -> dict[str, Any]:
        return {"id": self.nominee_id, "category_id": self.category_id}


@dataclass(frozen=True)
class NomineePhotoUpdated(ChangeEvent):
    name: ClassVar[str] = "nominee-photo-updated"

    nominee_id: int
    photo_url: str

    def payload(self) -> dict[str, Any]:
        return {"nominee_id": self.nominee_id, "photo_url": self.photo_url}


@dataclass(frozen=True)
class NomineePhotoDeleted(ChangeEvent):
    name: ClassVar[str] = "nominee-photo-deleted"

    nominee_id: int

    def payload(self) -> dict[str, Any]:
        return {"nominee_id": self.nominee_id}


# Votes


@dataclass(frozen=True)
class VoteCast(ChangeEvent):
    """Tallies are never pushed; clients refetch counts on demand."""

    name: ClassVar[str] = "vote-cast"

    category_id: str
    nominee_id: int
    session_id: str

    def payload(self) -> dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "nomineeId": self.nominee_id,
            "sessionId": self.session_id,
        }


# Admin-only


@dataclass(frozen=True)
class SettingUpdated(ChangeEvent):
    name: ClassVar[str] = "setting-updated"

    key: str
    value: str

    def payload(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


PUBLIC_EVENTS: tuple[type[ChangeEvent], ...] = (
    CategoryCreated,
    CategoryUpdated,
    CategoryDeleted,
    NomineeAdded,
    NomineeUpdated,
    NomineeDeleted,
    NomineePhotoUpdated,
    NomineePhotoDeleted,
    VoteCast,
)

ADMIN_EVENTS: tuple[type[ChangeEvent], ...] = (SettingUpdated,)
