"""Core models shared across the backend (researcher profiles)."""

from __future__ import annotations

import uuid

from django.db import models

# Owner id used for analyses submitted without a signed-in researcher.
ANONYMOUS_OWNER_ID = uuid.UUID(int=0)


class ProfileRole(models.TextChoices):
    ARCHAEOLOGIST = "archaeologist", "Archaeologist"
    RESEARCHER = "researcher", "Researcher"
    ADMIN = "admin", "Admin"


class Profile(models.Model):
    """Researcher profile keyed by the identity issued by the auth provider."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=255, blank=True)
    institution = models.CharField(max_length=255, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    role = models.CharField(
        max_length=16,
        choices=ProfileRole.choices,
        default=ProfileRole.ARCHAEOLOGIST,
    )
    avatar_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.full_name or str(self.id)
