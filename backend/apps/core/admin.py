"""Admin registrations for core models."""

from django.contrib import admin

from . import models


@admin.register(models.Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "full_name", "institution", "role", "created_at")
    search_fields = ("full_name", "institution", "specialization")
    list_filter = ("role",)
    ordering = ("full_name",)
    readonly_fields = ("created_at", "updated_at")
