"""Persisted direct and team messages."""

from __future__ import annotations

import uuid

from django.db import models

from apps.artifacts.models import Artifact
from apps.teams.models import Team


class Message(models.Model):
    """A message addressed to exactly one peer or one team."""

    id = models.UUIDField(primary_key=True, editable=False, default=uuid.uuid4)
    sender_id = models.UUIDField(db_index=True)
    recipient_id = models.UUIDField(null=True, blank=True, db_index=True)
    team = models.ForeignKey(
        Team,
        related_name="messages",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
    )
    content = models.TextField()
    artifact = models.ForeignKey(
        Artifact,
        related_name="shared_in",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(recipient_id__isnull=False, team__isnull=True)
                    | models.Q(recipient_id__isnull=True, team__isnull=False)
                ),
                name="message_single_target",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.content[:50]
