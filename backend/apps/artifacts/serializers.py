"""Serializers for artifact APIs."""

from rest_framework import serializers

from . import models


class ArtifactImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.ArtifactImage
        fields = ["id", "image_url", "position", "is_primary", "created_at"]
        read_only_fields = fields


class ArtifactSerializer(serializers.ModelSerializer):
    images = ArtifactImageSerializer(many=True, read_only=True)
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = models.Artifact
        fields = [
            "id",
            "owner_id",
            "title",
            "classification",
            "description",
            "material",
            "era",
            "region",
            "latitude",
            "longitude",
            "excavation_notes",
            "ai_report",
            "confidence_score",
            "status",
            "image_url",
            "images",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_image_url(self, obj):
        return obj.primary_image_url()


class ArtifactSummarySerializer(serializers.ModelSerializer):
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = models.Artifact
        fields = [
            "id",
            "owner_id",
            "title",
            "classification",
            "era",
            "region",
            "status",
            "confidence_score",
            "image_url",
            "created_at",
        ]
        read_only_fields = fields

    def get_image_url(self, obj):
        return obj.primary_image_url()


class ArtifactUpdateSerializer(serializers.ModelSerializer):
    """Dashboard edits: lifecycle status and title only."""

    class Meta:
        model = models.Artifact
        fields = ["title", "status"]
        extra_kwargs = {"title": {"required": False}, "status": {"required": False}}

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title may not be blank.")
        return value


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class AnalyzeRequestSerializer(serializers.Serializer):
    images = serializers.ListField(
        child=serializers.CharField(trim_whitespace=True),
        required=False,
        default=list,
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location = LocationSerializer(required=False, allow_null=True)
    userId = serializers.UUIDField(required=False, allow_null=True)


class DiscoveryQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    material = serializers.CharField(required=False, allow_blank=True)
    culture = serializers.CharField(required=False, allow_blank=True)
