"""Read side: categories, tallies, per-session votes and dashboard stats."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.db.models import Prefetch
from django.db.models import Q
from django.db.models.functions import TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from gala_voting.users.models import ROLE_ADMIN
from gala_voting.voting.models import VOTING_ENABLED
from gala_voting.voting.models import VOTING_END_DATE
from gala_voting.voting.models import Category
from gala_voting.voting.models import Nominee
from gala_voting.voting.models import SystemSetting
from gala_voting.voting.models import Vote

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5
DAILY_WINDOW_DAYS = 7


@dataclass(frozen=True)
class VotingStatus:
    is_open: bool
    reason: str = ""
    end_date: datetime | None = None


def parse_end_date(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        parsed = parse_datetime(raw.strip())
    except ValueError:
        parsed = None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, UTC)
    return parsed


def voting_status(now: datetime | None = None) -> VotingStatus:
    """Voting is open only while enabled and before the configured end date.

    A missing ``voting_enabled`` row means closed. A missing or unparsable end
    date means there is no deadline.
    """
    now = now or timezone.now()
    values = dict(
        SystemSetting.objects.filter(key__in=[VOTING_ENABLED, VOTING_END_DATE]).values_list(
            "key",
            "value",
        ),
    )
    raw_end = values.get(VOTING_END_DATE)
    end_date = parse_end_date(raw_end)
    if raw_end and end_date is None:
        logger.warning("Ignoring unparsable %s setting: %r", VOTING_END_DATE, raw_end)

    if values.get(VOTING_ENABLED, "").strip().lower() != "true":
        return VotingStatus(is_open=False, reason="Voting is currently disabled", end_date=end_date)
    if end_date is not None and now > end_date:
        return VotingStatus(is_open=False, reason="Voting deadline has passed", end_date=end_date)
    return VotingStatus(is_open=True, end_date=end_date)


def get_categories() -> list[dict]:
    """Active categories in display order with their active nominees."""
    active_nominees = Nominee.objects.filter(is_active=True).order_by(
        "display_order",
        "created_at",
        "id",
    )
    categories = (
        Category.objects.filter(is_active=True)
        .annotate(nominee_count=Count("nominees", filter=Q(nominees__is_active=True)))
        .prefetch_related(Prefetch("nominees", queryset=active_nominees, to_attr="active_nominees"))
        .order_by("display_order", "created_at")
    )
    return [
        {
            **category.snapshot(),
            "nominee_count": category.nominee_count,
            "nominees": [
                {
                    "id": nominee.pk,
                    "name": nominee.name,
                    "description": nominee.description,
                    "photo_url": nominee.photo_url,
                    "display_order": nominee.display_order,
                }
                for nominee in category.active_nominees
            ],
        }
        for category in categories
    ]


def get_vote_stats() -> dict[str, dict]:
    """Vote counts per active nominee, grouped by active non-award category.

    Shape: ``{category_id: {"category_title", "nominees": [{nominee_id,
    nominee_name, vote_count}]}}``.
    """
    stats: dict[str, dict] = {
        category.pk: {"category_title": category.title, "nominees": []}
        for category in Category.objects.filter(is_active=True, is_award=False).order_by(
            "display_order",
            "created_at",
        )
    }
    rows = (
        Nominee.objects.filter(
            is_active=True,
            category__is_active=True,
            category__is_award=False,
        )
        .annotate(vote_count=Count("votes"))
        .order_by("display_order", "created_at", "id")
        .values("id", "name", "category_id", "vote_count")
    )
    for row in rows:
        stats[row["category_id"]]["nominees"].append(
            {
                "nominee_id": row["id"],
                "nominee_name": row["name"],
                "vote_count": row["vote_count"],
            },
        )
    return stats


def get_tally() -> dict[str, dict[str, int]]:
    """Compact ``{category_id: {nominee_name: vote_count}}`` view of the stats."""
    return {
        category_id: {n["nominee_name"]: n["vote_count"] for n in entry["nominees"]}
        for category_id, entry in get_vote_stats().items()
    }


def get_session_votes(session_id: str) -> dict[str, dict]:
    """Current choice of ``session_id`` in each category it voted in."""
    votes = Vote.objects.filter(
        session_id=session_id,
        nominee__is_active=True,
        category__is_active=True,
    ).select_related("nominee")
    return {
        vote.category_id: {"nominee_id": vote.nominee_id, "nominee_name": vote.nominee.name}
        for vote in votes
    }


def get_system_stats(now: datetime | None = None) -> dict:
    """Dashboard figures for administrators."""
    now = now or timezone.now()
    since = now - timedelta(days=DAILY_WINDOW_DAYS)

    top_categories = (
        Category.objects.filter(is_active=True)
        .annotate(vote_count=Count("votes"))
        .order_by("-vote_count", "display_order")
        .values("id", "title", "vote_count")[:TOP_CATEGORIES]
    )
    daily = (
        Vote.objects.filter(created_at__gte=since)
        .annotate(date=TruncDate("created_at"))
        .values("date")
        .annotate(votes=Count("id"))
        .order_by("date")
    )

    admins = (
        get_user_model()
        .objects.filter(is_active=True)
        .filter(Q(is_staff=True) | Q(is_superuser=True) | Q(groups__name=ROLE_ADMIN))
        .distinct()
    )

    return {
        "total_admins": admins.count(),
        "total_categories": Category.objects.filter(is_active=True).count(),
        "total_nominees": Nominee.objects.filter(is_active=True).count(),
        "total_votes": Vote.objects.count(),
        "unique_voters": Vote.objects.values("session_id").distinct().count(),
        "top_categories": [
            {"category_id": row["id"], "title": row["title"], "vote_count": row["vote_count"]}
            for row in top_categories
        ],
        "daily_votes": [
            {"date": row["date"].isoformat(), "votes": row["votes"]} for row in daily
        ],
        "voting": _status_payload(voting_status(now)),
    }


def _status_payload(status: VotingStatus) -> dict:
    return {
        "is_open": status.is_open,
        "reason": status.reason,
        "end_date": status.end_date.isoformat() if status.end_date else None,
    }


def get_settings() -> dict:
    settings_rows = SystemSetting.objects.order_by("key")
    return {
        "settings": {
            row.key: {"value": row.value, "description": row.description}
            for row in settings_rows
        },
        "voting": _status_payload(voting_status()),
    }
