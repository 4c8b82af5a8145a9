"""Request-shape serializers.

These only check types; business rules (required fields, existence, voting
window) belong to the mutation service so every entry point shares them.
They are instantiated with ``partial=True`` so absent keys stay absent.
"""

from rest_framework import serializers


class CategoryInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    icon = serializers.CharField(required=False, allow_blank=True, max_length=100)
    is_award = serializers.BooleanField(required=False)
    display_order = serializers.IntegerField(required=False)


class NomineeInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    display_order = serializers.IntegerField(required=False)


class VoteInputSerializer(serializers.Serializer):
    sessionId = serializers.CharField(required=False, allow_blank=True, max_length=255)  # noqa: N815
    categoryId = serializers.CharField(required=False, allow_blank=True, max_length=100)  # noqa: N815
    nomineeId = serializers.IntegerField(required=False)  # noqa: N815


class SettingInputSerializer(serializers.Serializer):
    value = serializers.CharField(allow_blank=True)


class PhotoUploadSerializer(serializers.Serializer):
    photo = serializers.FileField()
