"""Initial schema for artifacts, their images and catalogue matches."""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="Artifact",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "owner_id",
                    models.UUIDField(
                        db_index=True,
                        default=uuid.UUID("00000000-0000-0000-0000-000000000000"),
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("classification", models.CharField(blank=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("material", models.TextField(blank=True)),
                ("era", models.TextField(blank=True)),
                ("region", models.TextField(blank=True)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("excavation_notes", models.TextField(blank=True)),
                ("ai_report", models.JSONField(blank=True, default=dict)),
                ("confidence_score", models.FloatField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("stable", "Stable"),
                            ("critical", "Critical"),
                            ("pending", "Pending"),
                        ],
                        default="stable",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "artifacts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="artifacts_created_idx"),
                    models.Index(fields=["status"], name="artifacts_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ArtifactImage",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("image_url", models.CharField(max_length=500)),
                ("storage_path", models.CharField(blank=True, max_length=255)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("is_primary", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "artifact",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="images",
                        to="artifacts.artifact",
                    ),
                ),
            ],
            options={
                "db_table": "artifact_images",
                "ordering": ["position", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="SimilarArtifactsCache",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("results", models.JSONField(blank=True, default=list)),
                ("cached_at", models.DateTimeField(auto_now=True)),
                (
                    "artifact",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="similar_cache",
                        to="artifacts.artifact",
                    ),
                ),
            ],
            options={
                "db_table": "similar_artifacts_cache",
                "verbose_name": "Similar artifacts cache",
            },
        ),
    ]
