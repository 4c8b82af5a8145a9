from http import HTTPStatus

import pytest
from django.urls import reverse
from drf_spectacular.generators import SchemaGenerator


def test_api_v1_docs_accessible_by_admin(admin_client):
    response = admin_client.get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.OK


def test_api_v1_docs_accessible_by_admin_group_member_without_staff(client, admin_user):
    assert not admin_user.is_staff
    client.force_login(admin_user)
    response = client.get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.OK


def test_api_v1_docs_forbidden_for_non_admin(client, user):
    client.force_login(user)
    response = client.get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.FORBIDDEN


@pytest.mark.django_db
def test_api_v1_docs_not_accessible_by_anonymous_users(client):
    response = client.get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.UNAUTHORIZED


def test_api_v1_schema_generated_successfully(admin_client):
    response = admin_client.get(reverse("api-schema-v1"))
    assert response.status_code == HTTPStatus.OK


def test_schema_tag_grouping(db):
    schema = SchemaGenerator().get_schema(request=None, public=True)
    paths = schema["paths"]

    def tags_of(path):
        return next(iter(paths[path].values())).get("tags")

    assert tags_of("/api/v1/auth/jwt/create/") == ["JWT Authentication"]
    assert tags_of("/api/v1/categories/") == ["Categories"]
    assert tags_of("/api/v1/categories/{category_id}/nominees/") == ["Nominees"]
    assert tags_of("/api/v1/vote/") == ["Voting"]
    assert tags_of("/api/v1/audit/recent/") == ["Administration"]
    assert tags_of("/api/v1/admin/users/") == ["Administration"]
    assert tags_of("/api/v1/admin/backup/") == ["Administration"]
    assert tags_of("/api/v1/auth/logout/") == ["Authentication"]
