"""REST API endpoints for researcher profiles."""

from __future__ import annotations

from django.urls import path
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.artifacts.models import Artifact

from . import models, serializers

app_name = "core"


class ProfileDetailView(APIView):
    """A researcher's profile with the artifacts they have catalogued."""

    def get(self, request, pk):
        try:
            profile = models.Profile.objects.get(pk=pk)
        except models.Profile.DoesNotExist:
            return Response({"detail": "Not found"}, status=status.HTTP_404_NOT_FOUND)

        artifacts = list(
            Artifact.objects.filter(owner_id=profile.id)
            .prefetch_related("images")
            .order_by("-created_at")
        )
        serializer = serializers.ProfileDetailSerializer(
            profile,
            context={"artifacts": artifacts},
        )
        return Response(serializer.data)

    def patch(self, request, pk):
        # Profiles are keyed by the auth provider's id, so the first valid edit creates the row.
        profile = models.Profile.objects.filter(pk=pk).first()
        serializer = serializers.ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if profile is None:
            serializer.save(id=pk)
        else:
            serializer.save()
        return Response(serializer.data)


urlpatterns = [
    path("<uuid:pk>/", ProfileDetailView.as_view(), name="profile-detail"),
]
