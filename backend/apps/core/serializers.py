"""Serializers for researcher profiles."""

from rest_framework import serializers

from apps.artifacts.serializers import ArtifactSummarySerializer

from . import models


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.Profile
        fields = [
            "id",
            "full_name",
            "institution",
            "specialization",
            "role",
            "avatar_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ProfileDetailSerializer(ProfileSerializer):
    artifacts = serializers.SerializerMethodField()
    artifact_count = serializers.SerializerMethodField()

    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + ["artifact_count", "artifacts"]

    def get_artifacts(self, obj):
        artifacts = self.context.get("artifacts", [])
        return ArtifactSummarySerializer(artifacts, many=True).data

    def get_artifact_count(self, obj):
        return len(self.context.get("artifacts", []))
