"""REST API endpoints for research teams."""

from __future__ import annotations

import uuid

from django.urls import path
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import models, serializers, services

app_name = "teams"


class TeamListCreateView(APIView):
    def get(self, request):
        raw_user = request.query_params.get("user")
        if not raw_user:
            return Response({"detail": "user is required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            user_id = uuid.UUID(raw_user)
        except ValueError:
            return Response({"detail": "user must be a UUID"}, status=status.HTTP_400_BAD_REQUEST)

        teams = services.teams_for_user(user_id)
        return Response({"results": serializers.TeamSerializer(teams, many=True).data})

    def post(self, request):
        serializer = serializers.TeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.create_team(
            name=serializer.validated_data["name"],
            description=serializer.validated_data.get("description", ""),
            created_by=serializer.validated_data["created_by"],
        )
        team = models.Team.objects.prefetch_related("members").get(pk=team.pk)
        return Response(serializers.TeamSerializer(team).data, status=status.HTTP_201_CREATED)


class TeamMemberCreateView(APIView):
    def post(self, request, pk):
        try:
            team = models.Team.objects.get(pk=pk)
        except models.Team.DoesNotExist:
            return Response({"detail": "Not found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = serializers.AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member, created = services.add_member(
            team,
            serializer.validated_data["user_id"],
            role=serializer.validated_data["role"],
        )
        return Response(
            serializers.TeamMemberSerializer(member).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


urlpatterns = [
    path("", TeamListCreateView.as_view(), name="team-list"),
    path("<uuid:pk>/members/", TeamMemberCreateView.as_view(), name="team-members"),
]
