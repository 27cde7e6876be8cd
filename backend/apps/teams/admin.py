"""Admin registrations for team models."""

from django.contrib import admin

from . import models


class TeamMemberInline(admin.TabularInline):
    model = models.TeamMember
    extra = 0


@admin.register(models.Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_by", "created_at")
    search_fields = ("name", "description")
    ordering = ("name",)
    inlines = [TeamMemberInline]
