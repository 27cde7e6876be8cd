"""Admin registrations for artifact models."""

from django.contrib import admin

from . import models


class ArtifactImageInline(admin.TabularInline):
    model = models.ArtifactImage
    extra = 0
    readonly_fields = ("image_url", "storage_path", "position", "is_primary", "created_at")


@admin.register(models.Artifact)
class ArtifactAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "classification", "status", "confidence_score", "created_at")
    search_fields = ("title", "classification", "material", "era", "region")
    list_filter = ("status",)
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [ArtifactImageInline]


@admin.register(models.SimilarArtifactsCache)
class SimilarArtifactsCacheAdmin(admin.ModelAdmin):
    list_display = ("artifact", "cached_at")
    raw_id_fields = ("artifact",)
