"""Message persistence and conversation queries."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from django.db.models import Q, QuerySet

from apps.core.models import ANONYMOUS_OWNER_ID

from . import models

logger = logging.getLogger(__name__)

# Replies from the research assistant are stored under the anonymous sentinel id.
ASSISTANT_SENDER_ID = ANONYMOUS_OWNER_ID


class InvalidMessageTarget(ValueError):
    """A message must name exactly one of a recipient or a team."""


def send_message(
    *,
    sender_id: uuid.UUID,
    content: str,
    recipient_id: Optional[uuid.UUID] = None,
    team_id: Optional[uuid.UUID] = None,
    artifact_id: Optional[uuid.UUID] = None,
) -> models.Message:
    if (recipient_id is None) == (team_id is None):
        raise InvalidMessageTarget("Exactly one of recipient_id or team_id is required")

    message = models.Message.objects.create(
        sender_id=sender_id,
        recipient_id=recipient_id,
        team_id=team_id,
        content=content,
        artifact_id=artifact_id,
    )
    logger.debug("Message %s sent by %s", message.id, sender_id)
    return message


def conversation(
    user_id: uuid.UUID,
    *,
    peer_id: Optional[uuid.UUID] = None,
    team_id: Optional[uuid.UUID] = None,
) -> QuerySet[models.Message]:
    """Messages in a team channel, or between ``user_id`` and ``peer_id``."""

    if (peer_id is None) == (team_id is None):
        raise InvalidMessageTarget("Exactly one of peer or team is required")

    queryset = models.Message.objects.select_related("artifact")
    if team_id is not None:
        return queryset.filter(team_id=team_id).order_by("created_at")
    return queryset.filter(
        Q(sender_id=user_id, recipient_id=peer_id) | Q(sender_id=peer_id, recipient_id=user_id)
    ).order_by("created_at")
