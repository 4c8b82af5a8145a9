from django.urls import path

from gala_voting.voting.api.views import NomineeCollectionView
from gala_voting.voting.api.views import NomineeDetailView
from gala_voting.voting.api.views import NomineePhotoView
from gala_voting.voting.api.views import SessionVotesView
from gala_voting.voting.api.views import SettingDetailView
from gala_voting.voting.api.views import SettingsView
from gala_voting.voting.api.views import SystemStatsView
from gala_voting.voting.api.views import VoteStatsView
from gala_voting.voting.api.views import VoteView

urlpatterns = [
    path(
        "categories/<slug:category_id>/nominees/",
        NomineeCollectionView.as_view(),
        name="nominee-list",
    ),
    path(
        "categories/<slug:category_id>/nominees/<int:nominee_id>/",
        NomineeDetailView.as_view(),
        name="nominee-detail",
    ),
    path(
        "nominees/<int:nominee_id>/photo/",
        NomineePhotoView.as_view(),
        name="nominee-photo",
    ),
    path("vote/", VoteView.as_view(), name="vote"),
    path("votes/stats/", VoteStatsView.as_view(), name="vote-stats"),
    path(
        "votes/session/<str:session_id>/",
        SessionVotesView.as_view(),
        name="session-votes",
    ),
    path("settings/", SettingsView.as_view(), name="settings"),
    path("settings/<str:key>/", SettingDetailView.as_view(), name="setting-detail"),
    path("admin/system-stats/", SystemStatsView.as_view(), name="system-stats"),
]
