"""Research teams and their memberships."""

from __future__ import annotations

import uuid

from django.db import models


class TeamRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class Team(models.Model):
    id = models.UUIDField(primary_key=True, editable=False, default=uuid.uuid4)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_by = models.UUIDField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class TeamMember(models.Model):
    team = models.ForeignKey(Team, related_name="members", on_delete=models.CASCADE)
    user_id = models.UUIDField(db_index=True)
    role = models.CharField(max_length=16, choices=TeamRole.choices, default=TeamRole.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at"]
        constraints = [
            models.UniqueConstraint(fields=["team", "user_id"], name="unique_team_member"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user_id} in {self.team_id}"
