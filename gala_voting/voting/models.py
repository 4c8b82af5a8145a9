from django.core.files.storage import default_storage
from django.db import models
from django.utils import timezone

# Seeded by migration 0002 and by ``manage.py setup_gala``.
VOTING_ENABLED = "voting_enabled"
VOTING_END_DATE = "voting_end_date"
SITE_TITLE = "site_title"
MAX_VOTES_PER_SESSION = "max_votes_per_session"

DEFAULT_SETTINGS = {
    VOTING_ENABLED: ("true", "Whether voting is currently enabled"),
    VOTING_END_DATE: ("2025-07-10T23:59:59Z", "Voting end date and time"),
    SITE_TITLE: (
        "Dreamers Academy Camp - 10th Year Celebration Gala",
        "Site title",
    ),
    MAX_VOTES_PER_SESSION: ("1", "Maximum votes per session per category"),
}


class Category(models.Model):
    """An award category. Deleting one only deactivates it."""

    id = models.CharField(primary_key=True, max_length=100)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=100)
    # Award categories are presented without a public tally.
    is_award = models.BooleanField(default=False)
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "categories"
        ordering = ["display_order", "created_at"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.title

    def snapshot(self) -> dict:
        return {
            "id": self.pk,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "is_award": self.is_award,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }


class Nominee(models.Model):
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="nominees",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    # Storage name of the uploaded photo, empty when there is none.
    photo = models.CharField(max_length=255, blank=True, default="")
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "nominees"
        ordering = ["display_order", "created_at", "id"]

    def __str__(self) -> str:
        return self.name

    @property
    def photo_url(self) -> str | None:
        return default_storage.url(self.photo) if self.photo else None

    def snapshot(self) -> dict:
        return {
            "id": self.pk,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "photo": self.photo,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }


class Vote(models.Model):
    """One session's choice within one category."""

    session_id = models.CharField(max_length=255, db_index=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="votes",
    )
    nominee = models.ForeignKey(
        Nominee,
        on_delete=models.CASCADE,
        related_name="votes",
    )
    ip_address = models.CharField(max_length=64, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "votes"
        constraints = [
            models.UniqueConstraint(
                fields=["session_id", "category"],
                name="unique_vote_per_session_category",
            ),
        ]
        indexes = [models.Index(fields=["category", "nominee"], name="votes_category_nominee_idx")]

    def __str__(self) -> str:
        return f"{self.session_id} -> {self.category_id}/{self.nominee_id}"


class SystemSetting(models.Model):
    key = models.CharField(primary_key=True, max_length=100)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "system_settings"
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"

    @classmethod
    def ensure_defaults(cls) -> int:
        """Create any missing default settings; returns how many were added."""
        created = 0
        for key, (value, description) in DEFAULT_SETTINGS.items():
            _, was_created = cls.objects.get_or_create(
                key=key,
                defaults={"value": value, "description": description},
            )
            created += int(was_created)
        return created
