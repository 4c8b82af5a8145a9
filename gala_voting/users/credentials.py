"""Credential verification for the realtime admin group.

Accepts an opaque access token and answers ``valid`` and ``role``; callers
only act on ``role == "admin"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Credential:
    valid: bool
    role: str | None = None
    user_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.valid and self.role == ADMIN_ROLE


INVALID = Credential(valid=False)


def verify_access_token(token: str | None) -> Credential:
    """Validate a simplejwt access token and resolve the user's role.

    Never raises for bad input: malformed, expired or unknown-user tokens all
    come back as ``Credential(valid=False)``.
    """
    if not token or not isinstance(token, str):
        return INVALID

    jwt_auth = JWTAuthentication()
    try:
        validated = jwt_auth.get_validated_token(token)
        user = jwt_auth.get_user(validated)
    except (TokenError, AuthenticationFailed) as exc:
        logger.info("Rejected access token: %s", exc)
        return INVALID

    return Credential(valid=True, role=user.role, user_id=int(user.pk))
