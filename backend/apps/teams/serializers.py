"""Serializers for team APIs."""

from rest_framework import serializers

from . import models


class TeamMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.TeamMember
        fields = ["user_id", "role", "joined_at"]
        read_only_fields = ["joined_at"]


class TeamSerializer(serializers.ModelSerializer):
    members = TeamMemberSerializer(many=True, read_only=True)

    class Meta:
        model = models.Team
        fields = ["id", "name", "description", "created_by", "created_at", "members"]
        read_only_fields = ["id", "created_at", "members"]


class AddMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=models.TeamRole.choices, default=models.TeamRole.MEMBER)
