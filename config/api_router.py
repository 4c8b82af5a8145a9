from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from gala_voting.users.api.views import AdminUserViewSet
from gala_voting.users.api.views import BackupView
from gala_voting.voting.api.views import CategoryViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("categories", CategoryViewSet, basename="category")
router.register("admin/users", AdminUserViewSet, basename="admin-user")


app_name = "api"
# Nested and non-viewset routes first so they take precedence over the router.
urlpatterns = [
    path(
        "audit/",
        include(("gala_voting.audit.api.urls", "audit"), namespace="audit"),
    ),
    path("admin/backup/", BackupView.as_view(), name="admin-backup"),
    path("", include("gala_voting.voting.api.urls")),
    *router.urls,
]
