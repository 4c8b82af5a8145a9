from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework.response import Response
from rest_framework.views import APIView

from gala_voting.audit.api.serializers import AuditEntrySerializer
from gala_voting.audit.models import AuditEntry
from gala_voting.users.api.permissions import IsGalaAdmin

if TYPE_CHECKING:
    from django.db.models import QuerySet

DEFAULT_LIMIT = 5
MAX_LIMIT = 50


class RecentAuditView(APIView):
    permission_classes = [IsGalaAdmin]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))

        qs: QuerySet[AuditEntry] = AuditEntry.objects.select_related("actor").all()
        action = request.query_params.get("action")
        if action:
            qs = qs.filter(action=action.upper())
        rows = list(qs[:limit])
        data = AuditEntrySerializer(rows, many=True).data
        return Response({"results": data, "limit": limit})
