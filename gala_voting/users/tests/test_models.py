import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from gala_voting.users.api.permissions import IsGalaAdmin
from gala_voting.users.models import User


def test_user_role_plain(user: User):
    assert user.is_gala_admin is False
    assert user.role == "user"


def test_user_role_group_member(admin_user: User):
    assert admin_user.is_gala_admin is True
    assert admin_user.role == "admin"


def test_staff_is_admin(user: User):
    user.is_staff = True
    assert user.is_gala_admin is True


def test_inactive_admin_is_not_admin(admin_user: User):
    admin_user.is_active = False
    assert admin_user.is_gala_admin is False
    assert admin_user.role == "user"


@pytest.mark.django_db
def test_is_gala_admin_permission(user: User, admin_user: User):
    permission = IsGalaAdmin()
    request = APIRequestFactory().get("/")

    request.user = AnonymousUser()
    assert permission.has_permission(request, None) is False
    request.user = user
    assert permission.has_permission(request, None) is False
    request.user = admin_user
    assert permission.has_permission(request, None) is True
