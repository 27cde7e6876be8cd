"""Database models for catalogued artifacts and their photographs."""

from __future__ import annotations

import uuid

from django.db import models

from apps.core.models import ANONYMOUS_OWNER_ID


class ArtifactStatus(models.TextChoices):
    STABLE = "stable", "Stable"
    CRITICAL = "critical", "Critical"
    PENDING = "pending", "Pending"


class Artifact(models.Model):
    """A catalogued specimen together with its scholarly AI report."""

    id = models.UUIDField(primary_key=True, editable=False, default=uuid.uuid4)
    owner_id = models.UUIDField(default=ANONYMOUS_OWNER_ID, db_index=True)
    title = models.CharField(max_length=255)
    classification = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    material = models.TextField(blank=True)
    era = models.TextField(blank=True)
    region = models.TextField(blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    excavation_notes = models.TextField(blank=True)
    ai_report = models.JSONField(default=dict, blank=True)
    confidence_score = models.FloatField(null=True, blank=True)
    status = models.CharField(
        max_length=16,
        choices=ArtifactStatus.choices,
        default=ArtifactStatus.STABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "artifacts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="artifacts_created_idx"),
            models.Index(fields=["status"], name="artifacts_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title[:50]

    @property
    def has_coordinates(self) -> bool:
        if self.latitude is None or self.longitude is None:
            return False
        return not (self.latitude == 0 and self.longitude == 0)

    def primary_image_url(self) -> str | None:
        for image in self.images.all():
            if image.is_primary:
                return image.image_url
        return None


class ArtifactImage(models.Model):
    """One uploaded photograph of an artifact; rows are never updated."""

    id = models.UUIDField(primary_key=True, editable=False, default=uuid.uuid4)
    artifact = models.ForeignKey(Artifact, related_name="images", on_delete=models.CASCADE)
    image_url = models.CharField(max_length=500)
    storage_path = models.CharField(max_length=255, blank=True)
    position = models.PositiveSmallIntegerField(default=0)
    is_primary = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "artifact_images"
        ordering = ["position", "created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Image {self.position} of {self.artifact_id}"


class SimilarArtifactsCache(models.Model):
    """Most recent museum catalogue matches for an artifact."""

    artifact = models.OneToOneField(
        Artifact,
        related_name="similar_cache",
        on_delete=models.CASCADE,
    )
    results = models.JSONField(default=list, blank=True)
    cached_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "similar_artifacts_cache"
        verbose_name = "Similar artifacts cache"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Similar artifacts for {self.artifact_id}"
