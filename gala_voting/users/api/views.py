from functools import partial

from django.contrib.auth.models import Group
from django.db import transaction
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.views import TokenObtainPairView

from gala_voting.audit import recorder as audit
from gala_voting.audit.recorder import AuditRecorder
from gala_voting.users.api.permissions import IsGalaAdmin
from gala_voting.users.api.serializers import AdminUserSerializer
from gala_voting.users.api.serializers import UserCreateSerializer
from gala_voting.users.api.serializers import UserUpdateSerializer
from gala_voting.users.backup import build_backup
from gala_voting.users.models import ROLE_ADMIN
from gala_voting.users.models import User


class LoginAuditedTokenObtainPairView(TokenObtainPairView):
    """JWT login that leaves a LOGIN_SUCCESS audit entry.

    Failed attempts are audited by the ``user_login_failed`` receiver.
    """

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0]) from e

        user = serializer.user
        AuditRecorder().record(
            user.pk,
            audit.LOGIN_SUCCESS,
            "users",
            user.pk,
            after={"username": user.get_username(), "role": user.role},
            ip_address=request.META.get("REMOTE_ADDR", ""),
        )
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """Tokens are stateless; logging out only leaves a LOGOUT audit entry."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=None, tags=["Authentication"])
    def post(self, request):
        AuditRecorder().record(
            request.user.pk,
            audit.LOGOUT,
            "users",
            request.user.pk,
            ip_address=request.META.get("REMOTE_ADDR", ""),
        )
        return Response({"success": True, "message": "Logout successful"})


def _fail(message: str, kind: str, http_status: int) -> Response:
    return Response({"success": False, "message": message, "error": kind}, status=http_status)


def _audit_on_commit(request, action, record_id, before=None, after=None):
    transaction.on_commit(
        partial(
            AuditRecorder().record,
            request.user.pk,
            action,
            "users",
            record_id,
            before=before,
            after=after,
            ip_address=request.META.get("REMOTE_ADDR", ""),
        ),
        robust=True,
    )


def _user_snapshot(user: User) -> dict:
    return {
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
    }


def _taken_by_other(user: User, changes) -> bool:
    lookup = Q()
    for name in ("username", "email"):
        if name in changes:
            lookup |= Q(**{name: changes[name]})
    if not lookup:
        return False
    return User.objects.exclude(pk=user.pk).filter(lookup).exists()


def _set_role(user: User, role: str) -> None:
    group, _ = Group.objects.get_or_create(name=ROLE_ADMIN)
    if role == "admin":
        user.groups.add(group)
    else:
        user.groups.remove(group)


class AdminUserViewSet(viewsets.ViewSet):
    """Account management for the gala administrators."""

    permission_classes = [IsGalaAdmin]
    serializer_class = AdminUserSerializer
    lookup_value_regex = "[0-9]+"

    def list(self, request):
        users = User.objects.order_by("-created_at", "-id")
        data = AdminUserSerializer(users, many=True).data
        return Response({"success": True, "message": "", "data": data})

    @extend_schema(request=UserCreateSerializer)
    def create(self, request):
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return _fail("Invalid input", "invalid_input", status.HTTP_400_BAD_REQUEST)
        fields = serializer.validated_data
        username = fields.get("username", "").strip()
        email = fields.get("email", "").strip()
        password = fields.get("password", "")
        if not (username and email and password):
            return _fail(
                "Username, email, and password are required",
                "invalid_input",
                status.HTTP_400_BAD_REQUEST,
            )

        with transaction.atomic():
            if User.objects.filter(Q(username=username) | Q(email=email)).exists():
                return _fail(
                    "User with this username or email already exists",
                    "conflict",
                    status.HTTP_409_CONFLICT,
                )
            user = User.objects.create_user(username=username, email=email, password=password)
            _set_role(user, fields["role"])
            _audit_on_commit(
                request,
                audit.CREATE,
                user.pk,
                after={"username": username, "email": email, "role": user.role},
            )

        return Response(
            {
                "success": True,
                "message": "User created successfully",
                "data": {"id": user.pk, "username": username, "email": email, "role": user.role},
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=UserUpdateSerializer)
    def partial_update(self, request, pk=None):
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return _fail("Invalid input", "invalid_input", status.HTTP_400_BAD_REQUEST)
        changes = serializer.validated_data

        with transaction.atomic():
            user = User.objects.select_for_update().filter(pk=pk).first()
            if user is None:
                return _fail("User not found", "not_found", status.HTTP_404_NOT_FOUND)
            if _taken_by_other(user, changes):
                return _fail(
                    "User with this username or email already exists",
                    "conflict",
                    status.HTTP_409_CONFLICT,
                )

            before = _user_snapshot(user)
            for name in ("username", "email", "is_active"):
                if name in changes:
                    setattr(user, name, changes[name])
            user.save()
            if "role" in changes:
                _set_role(user, changes["role"])
            after = _user_snapshot(user)
            _audit_on_commit(request, audit.UPDATE, user.pk, before=before, after=after)

        return Response(
            {
                "success": True,
                "message": "User updated successfully",
                "data": AdminUserSerializer(user).data,
            },
        )

    update = partial_update

    def destroy(self, request, pk=None):
        if str(request.user.pk) == str(pk):
            return _fail(
                "Cannot delete your own account",
                "invalid_input",
                status.HTTP_400_BAD_REQUEST,
            )
        with transaction.atomic():
            user = User.objects.select_for_update().filter(pk=pk).first()
            if user is None:
                return _fail("User not found", "not_found", status.HTTP_404_NOT_FOUND)
            before = _user_snapshot(user)
            # Deactivate only; audit entries keep pointing at the account.
            user.is_active = False
            user.save(update_fields=["is_active", "updated_at"])
            _audit_on_commit(request, audit.DELETE, user.pk, before=before)

        return Response({"success": True, "message": "User deleted successfully"})


class BackupView(APIView):
    permission_classes = [IsGalaAdmin]

    @extend_schema(request=None)
    def post(self, request):
        backup = build_backup()
        AuditRecorder().record(
            request.user.pk,
            audit.BACKUP_CREATED,
            "system",
            "backup",
            after={"timestamp": backup["timestamp"]},
            ip_address=request.META.get("REMOTE_ADDR", ""),
        )
        return Response(
            {"success": True, "message": "Backup created successfully", "data": backup},
        )
