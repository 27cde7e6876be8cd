"""URL configuration for the Aletheon project."""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("apps.artifacts.api", namespace="artifacts")),
    path("api/profiles/", include("apps.core.api", namespace="core")),
    path("api/messages/", include("apps.messaging.api", namespace="messaging")),
    path("api/teams/", include("apps.teams.api", namespace="teams")),
]

if getattr(settings, "SERVE_ARTIFACT_MEDIA", False):
    # static() is a no-op unless DEBUG is on.
    urlpatterns += static(settings.ARTIFACT_MEDIA_URL, document_root=settings.ARTIFACT_MEDIA_ROOT)
