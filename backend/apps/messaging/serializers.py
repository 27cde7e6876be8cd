"""Serializers for messaging APIs."""

from rest_framework import serializers

from apps.artifacts.models import Artifact
from apps.teams.models import Team

from . import models


class MessageSerializer(serializers.ModelSerializer):
    team_id = serializers.UUIDField(read_only=True, allow_null=True)
    artifact_id = serializers.UUIDField(read_only=True, allow_null=True)
    artifact_title = serializers.SerializerMethodField()

    class Meta:
        model = models.Message
        fields = [
            "id",
            "sender_id",
            "recipient_id",
            "team_id",
            "content",
            "artifact_id",
            "artifact_title",
            "created_at",
        ]
        read_only_fields = fields

    def get_artifact_title(self, obj):
        return obj.artifact.title if obj.artifact_id and obj.artifact else None


class MessageCreateSerializer(serializers.Serializer):
    sender_id = serializers.UUIDField()
    content = serializers.CharField()
    recipient_id = serializers.UUIDField(required=False, allow_null=True)
    team_id = serializers.UUIDField(required=False, allow_null=True)
    artifact_id = serializers.UUIDField(required=False, allow_null=True)

    def validate_team_id(self, value):
        if value is not None and not Team.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Unknown team.")
        return value

    def validate_artifact_id(self, value):
        if value is not None and not Artifact.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Unknown artifact.")
        return value

    def validate(self, attrs):
        if (attrs.get("recipient_id") is None) == (attrs.get("team_id") is None):
            raise serializers.ValidationError("Exactly one of recipient_id or team_id is required.")
        return attrs


class ConversationQuerySerializer(serializers.Serializer):
    user = serializers.UUIDField()
    peer = serializers.UUIDField(required=False)
    team = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if ("peer" in attrs) == ("team" in attrs):
            raise serializers.ValidationError("Exactly one of peer or team is required.")
        return attrs


class AssistantRequestSerializer(serializers.Serializer):
    message = serializers.CharField()
    senderId = serializers.UUIDField(required=False, allow_null=True)
    teamId = serializers.UUIDField(required=False, allow_null=True)

    def validate_teamId(self, value):
        if value is not None and not Team.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Unknown team.")
        return value
