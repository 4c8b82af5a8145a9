"""REST adapter over the mutation service and read queries.

Every response uses the ``{"success", "message", "data"}`` envelope the
frontend expects.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import suppress
from pathlib import PurePosixPath

from django.conf import settings
from django.core.files.storage import default_storage
from drf_spectacular.utils import extend_schema
from PIL import Image
from PIL.Image import UnidentifiedImageError
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.parsers import FormParser
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from gala_voting.users.api.permissions import IsGalaAdmin
from gala_voting.voting import queries
from gala_voting.voting.api.serializers import CategoryInputSerializer
from gala_voting.voting.api.serializers import NomineeInputSerializer
from gala_voting.voting.api.serializers import PhotoUploadSerializer
from gala_voting.voting.api.serializers import SettingInputSerializer
from gala_voting.voting.api.serializers import VoteInputSerializer
from gala_voting.voting.services import MutationResult
from gala_voting.voting.services import Origin
from gala_voting.voting.services import get_mutation_service

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "voting_closed": status.HTTP_403_FORBIDDEN,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _origin(request) -> Origin:
    user = getattr(request, "user", None)
    actor_id = user.pk if user is not None and user.is_authenticated else None
    return Origin(
        actor_id=actor_id,
        ip_address=request.META.get("REMOTE_ADDR", ""),
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )


def _ok(data, message: str = "", http_status: int = status.HTTP_200_OK) -> Response:
    return Response({"success": True, "message": message, "data": data}, status=http_status)


def _respond(
    result: MutationResult,
    message: str,
    http_status: int = status.HTTP_200_OK,
) -> Response:
    if result.ok:
        return _ok(result.data, message, http_status)
    return Response(
        {"success": False, "message": result.message, "error": result.error_kind},
        status=ERROR_STATUS.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def _shape_error(serializer) -> Response:
    return Response(
        {
            "success": False,
            "message": "Invalid input",
            "error": "invalid_input",
            "errors": serializer.errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class CategoryViewSet(viewsets.ViewSet):
    """Public listing; everything else is admin-only."""

    lookup_value_regex = "[-a-zA-Z0-9_]+"
    serializer_class = CategoryInputSerializer

    def get_permissions(self):
        if self.action == "list":
            return [permissions.AllowAny()]
        return [IsGalaAdmin()]

    def list(self, request):
        return _ok(queries.get_categories())

    def create(self, request):
        serializer = CategoryInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _shape_error(serializer)
        result = get_mutation_service().create_category(
            serializer.validated_data,
            _origin(request),
        )
        return _respond(result, "Category created successfully", status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        serializer = CategoryInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _shape_error(serializer)
        changes = {k: v for k, v in serializer.validated_data.items() if k != "id"}
        result = get_mutation_service().update_category(pk, changes, _origin(request))
        return _respond(result, "Category updated successfully")

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        result = get_mutation_service().delete_category(pk, _origin(request))
        return _respond(result, "Category deleted successfully")


class NomineeCollectionView(APIView):
    permission_classes = [IsGalaAdmin]

    @extend_schema(request=NomineeInputSerializer)
    def post(self, request, category_id: str):
        serializer = NomineeInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _shape_error(serializer)
        result = get_mutation_service().add_nominee(
            category_id,
            serializer.validated_data,
            _origin(request),
        )
        return _respond(result, "Nominee added successfully", status.HTTP_201_CREATED)


class NomineeDetailView(APIView):
    permission_classes = [IsGalaAdmin]

    @extend_schema(request=NomineeInputSerializer)
    def patch(self, request, category_id: str, nominee_id: int):
        serializer = NomineeInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _shape_error(serializer)
        result = get_mutation_service().update_nominee(
            category_id,
            nominee_id,
            serializer.validated_data,
            _origin(request),
        )
        return _respond(result, "Nominee updated successfully")

    put = patch

    def delete(self, request, category_id: str, nominee_id: int):
        result = get_mutation_service().delete_nominee(category_id, nominee_id, _origin(request))
        return _respond(result, "Nominee deleted successfully")


def _is_image(upload) -> bool:
    try:
        # Pillow check that the bytes really are an image
        Image.open(upload).verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        return False
    finally:
        with suppress(Exception):
            upload.seek(0)
    return True


class NomineePhotoView(APIView):
    """Stores the upload, then hands its storage name to the service."""

    permission_classes = [IsGalaAdmin]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=PhotoUploadSerializer)
    def post(self, request, nominee_id: int):
        upload = request.FILES.get("photo")
        if upload is None:
            return Response(
                {"success": False, "message": "No file uploaded", "error": "invalid_input"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        extension = PurePosixPath(upload.name).suffix.lower().lstrip(".")
        if extension not in settings.GALA_PHOTO_EXTENSIONS:
            return Response(
                {
                    "success": False,
                    "message": "Only image files (jpeg, jpg, png, gif) are allowed",
                    "error": "invalid_input",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        if upload.size > settings.GALA_PHOTO_MAX_BYTES:
            return Response(
                {"success": False, "message": "File is too large", "error": "invalid_input"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not _is_image(upload):
            return Response(
                {"success": False, "message": "Invalid image file", "error": "invalid_input"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        name = default_storage.save(
            f"{settings.GALA_PHOTO_UPLOAD_DIR}nominee-{uuid.uuid4().hex}.{extension}",
            upload,
        )
        result = get_mutation_service().set_nominee_photo(nominee_id, name, _origin(request))
        if not result.ok:
            default_storage.delete(name)
        return _respond(result, "Photo uploaded successfully")

    def delete(self, request, nominee_id: int):
        result = get_mutation_service().clear_nominee_photo(nominee_id, _origin(request))
        return _respond(result, "Photo deleted successfully")


class VoteView(APIView):
    permission_classes = [permissions.AllowAny]
    # Voters are anonymous; a stale admin token must not turn a vote into a 401.
    authentication_classes: list = []

    @extend_schema(request=VoteInputSerializer)
    def post(self, request):
        serializer = VoteInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _shape_error(serializer)
        data = serializer.validated_data
        result = get_mutation_service().cast_vote(
            data.get("sessionId"),
            data.get("categoryId"),
            data.get("nomineeId"),
            _origin(request),
        )
        return _respond(result, "Vote cast successfully")


class VoteStatsView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return _ok(queries.get_vote_stats())


class SessionVotesView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get(self, request, session_id: str):
        return _ok(queries.get_session_votes(session_id))


class SettingsView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return _ok(queries.get_settings())


class SettingDetailView(APIView):
    permission_classes = [IsGalaAdmin]

    @extend_schema(request=SettingInputSerializer)
    def patch(self, request, key: str):
        serializer = SettingInputSerializer(data=request.data)
        if not serializer.is_valid():
            return _shape_error(serializer)
        result = get_mutation_service().update_setting(
            key,
            serializer.validated_data["value"],
            _origin(request),
        )
        return _respond(result, "Setting updated successfully")

    put = patch


class SystemStatsView(APIView):
    permission_classes = [IsGalaAdmin]

    def get(self, request):
        return _ok(queries.get_system_stats())
