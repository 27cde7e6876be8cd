"""App configuration for the artifact domain."""

from django.apps import AppConfig


class ArtifactsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.artifacts"
    verbose_name = "Artifacts"
