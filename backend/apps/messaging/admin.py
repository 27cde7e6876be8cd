"""Admin registrations for messaging models."""

from django.contrib import admin

from . import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "sender_id", "recipient_id", "team", "created_at")
    search_fields = ("content",)
    ordering = ("-created_at",)
    raw_id_fields = ("team", "artifact")
