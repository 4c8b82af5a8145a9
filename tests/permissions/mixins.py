from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from gala_voting.users.models import ROLE_ADMIN
from gala_voting.voting.models import Category
from gala_voting.voting.models import Nominee
from gala_voting.voting.models import SystemSetting
from tests.permissions.factories import create_user_with_role

ROLE_STAFF = "Staff"
ROLE_USER = "User"
ROLE_ANONYMOUS = "Anonymous"


class RoleAPITestCase(APITestCase):
    """Base test case with one user per role and a small ballot."""

    def setUp(self):
        super().setUp()
        self.roles = {
            ROLE_ADMIN: create_user_with_role("admin", groups=[ROLE_ADMIN]),
            ROLE_STAFF: create_user_with_role("staff", is_staff=True),
            ROLE_USER: create_user_with_role("user"),
        }
        SystemSetting.ensure_defaults()
        self.category = Category.objects.create(
            id="best-speaker",
            title="Best Speaker",
            icon="mic",
        )
        self.nominee = Nominee.objects.create(category=self.category, name="Alice")

    # Utilities -------------------------------------------------------------
    def authenticate(self, role: str):
        if role == ROLE_ANONYMOUS:
            self.client.force_authenticate(user=None)
        else:
            self.client.force_authenticate(user=self.roles[role])

    def assert_http_status(self, response, expected_status: int):
        msg = getattr(response, "data", response)
        assert response.status_code == expected_status, msg

    def get(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.get(url, **kwargs)

    def post(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.post(url, data=payload or {}, format="json", **kwargs)

    def patch(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.patch(url, data=payload or {}, format="json", **kwargs)

    def delete(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.delete(url, **kwargs)

    def assert_allowed(self, response):
        assert response.status_code in (
            status.HTTP_200_OK,
            status.HTTP_201_CREATED,
            status.HTTP_204_NO_CONTENT,
        ), response.data

    def assert_denied(self, response, codes=(status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)):
        assert response.status_code in codes, response.data
