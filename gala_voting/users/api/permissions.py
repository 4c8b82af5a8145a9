from rest_framework.permissions import BasePermission


class IsGalaAdmin(BasePermission):
    """Allow access only to staff or users in the Admin group."""

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        if not (u and getattr(u, "is_authenticated", False)):
            return False
        return bool(getattr(u, "is_gala_admin", False))
