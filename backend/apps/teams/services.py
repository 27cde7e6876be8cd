"""Team membership operations."""

from __future__ import annotations

import logging
import uuid

from django.db import transaction

from . import models

logger = logging.getLogger(__name__)


@transaction.atomic
def create_team(*, name: str, created_by: uuid.UUID, description: str = "") -> models.Team:
    """Create a team with its creator enrolled as admin."""

    team = models.Team.objects.create(name=name, description=description, created_by=created_by)
    models.TeamMember.objects.create(team=team, user_id=created_by, role=models.TeamRole.ADMIN)
    logger.info("Team %s created by %s", team.id, created_by)
    return team


def add_member(
    team: models.Team,
    user_id: uuid.UUID,
    role: str = models.TeamRole.MEMBER,
) -> tuple[models.TeamMember, bool]:
    """Enrol ``user_id``; an existing membership is returned unchanged."""

    return models.TeamMember.objects.get_or_create(
        team=team,
        user_id=user_id,
        defaults={"role": role},
    )


def teams_for_user(user_id: uuid.UUID):
    return (
        models.Team.objects.filter(members__user_id=user_id)
        .prefetch_related("members")
        .distinct()
        .order_by("name")
    )
