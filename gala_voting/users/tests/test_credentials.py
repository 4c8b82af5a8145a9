import pytest
from rest_framework_simplejwt.tokens import RefreshToken

from gala_voting.users.credentials import INVALID
from gala_voting.users.credentials import verify_access_token


@pytest.mark.django_db
def test_admin_token_resolves_admin_role(admin_user):
    access = str(RefreshToken.for_user(admin_user).access_token)

    credential = verify_access_token(access)

    assert credential.valid is True
    assert credential.role == "admin"
    assert credential.user_id == admin_user.pk
    assert credential.is_admin


@pytest.mark.django_db
def test_plain_user_token_is_valid_but_not_admin(user):
    access = str(RefreshToken.for_user(user).access_token)

    credential = verify_access_token(access)

    assert credential.valid is True
    assert credential.role == "user"
    assert not credential.is_admin


@pytest.mark.django_db
def test_token_of_deactivated_user_is_rejected(admin_user):
    access = str(RefreshToken.for_user(admin_user).access_token)
    admin_user.is_active = False
    admin_user.save(update_fields=["is_active"])

    assert verify_access_token(access) == INVALID


@pytest.mark.parametrize("token", [None, "", "not-a-jwt", 42])
def test_garbage_is_invalid(token):
    assert verify_access_token(token) == INVALID


@pytest.mark.django_db
def test_refresh_token_is_not_an_access_token(admin_user):
    refresh = str(RefreshToken.for_user(admin_user))

    assert verify_access_token(refresh).valid is False
