from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from gala_voting.audit.models import AuditEntry

User = get_user_model()


class AuditActorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "name"]


class AuditEntrySerializer(serializers.ModelSerializer):
    actor = AuditActorSerializer(allow_null=True)

    class Meta:
        model = AuditEntry
        fields = [
            "id",
            "action",
            "table_name",
            "record_id",
            "before",
            "after",
            "ip_address",
            "created_at",
            "actor",
        ]
