"""Read-through cache of vault catalogue summaries.

The database is authoritative. Entries are filled from it and reconciled
against it on ``load``; nothing read from the cache is ever written back.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Optional

from django.conf import settings
from django.core.cache import BaseCache, cache as default_cache

from apps.artifacts import models

logger = logging.getLogger(__name__)

KEY_PREFIX = "artifact-catalog"
INDEX_KEY = f"{KEY_PREFIX}:index"


def summarise_artifact(artifact: models.Artifact) -> dict[str, Any]:
    return {
        "id": str(artifact.id),
        "owner_id": str(artifact.owner_id),
        "title": artifact.title,
        "classification": artifact.classification,
        "material": artifact.material,
        "era": artifact.era,
        "region": artifact.region,
        "status": artifact.status,
        "confidence_score": artifact.confidence_score,
        "latitude": artifact.latitude,
        "longitude": artifact.longitude,
        "image_url": artifact.primary_image_url(),
        "created_at": artifact.created_at.isoformat() if artifact.created_at else None,
    }


class ArtifactCatalogCache:
    def __init__(self, cache: BaseCache | None = None, timeout: int | None = None) -> None:
        self.cache = cache or default_cache
        self.timeout = timeout if timeout is not None else settings.CATALOG_CACHE_TIMEOUT

    def get(self, artifact_id: uuid.UUID | str) -> Optional[dict[str, Any]]:
        """Cached summary, falling back to the database on a miss."""

        key = self._key(artifact_id)
        entry = self.cache.get(key)
        if entry is not None:
            return entry

        artifact = (
            models.Artifact.objects.prefetch_related("images").filter(pk=artifact_id).first()
        )
        if artifact is None:
            self._forget([str(artifact_id)])
            return None
        return self.remember(artifact)

    def remember(self, artifact: models.Artifact) -> dict[str, Any]:
        entry = summarise_artifact(artifact)
        self.cache.set(self._key(artifact.id), entry, self.timeout)
        index = self._index()
        if entry["id"] not in index:
            index.add(entry["id"])
            self._save_index(index)
        return entry

    def load(self, owner_id: uuid.UUID | str | None = None) -> list[dict[str, Any]]:
        """Refresh entries from the database and evict cached ids it no longer has.

        Scoped to one owner when ``owner_id`` is given.
        """

        queryset = models.Artifact.objects.prefetch_related("images").order_by("-created_at")
        if owner_id is not None:
            queryset = queryset.filter(owner_id=owner_id)
        artifacts = list(queryset)

        entries = [summarise_artifact(artifact) for artifact in artifacts]
        self.cache.set_many({self._key(entry["id"]): entry for entry in entries}, self.timeout)
        live_ids = {entry["id"] for entry in entries}

        index = self._index()
        stale = [
            artifact_id
            for artifact_id in self._owned_by(index, owner_id)
            if artifact_id not in live_ids
        ]
        if stale:
            logger.info("Evicting %s catalogue entries missing from the database", len(stale))
        index.difference_update(stale)
        index.update(live_ids)
        self.cache.delete_many([self._key(artifact_id) for artifact_id in stale])
        self._save_index(index)
        return entries

    def _owned_by(self, index: Iterable[str], owner_id: uuid.UUID | str | None) -> list[str]:
        ids = list(index)
        if owner_id is None:
            return ids
        cached = self.cache.get_many([self._key(artifact_id) for artifact_id in ids])
        owner = str(owner_id)
        owned = []
        for artifact_id in ids:
            entry = cached.get(self._key(artifact_id))
            # Expired entries cannot be attributed, so they are checked against the database.
            if entry is None or entry.get("owner_id") == owner:
                owned.append(artifact_id)
        if owned:
            existing = {
                str(pk)
                for pk in models.Artifact.objects.filter(pk__in=owned)
                .exclude(owner_id=owner_id)
                .values_list("pk", flat=True)
            }
            owned = [artifact_id for artifact_id in owned if artifact_id not in existing]
        return owned

    def _forget(self, artifact_ids: list[str]) -> None:
        self.cache.delete_many([self._key(artifact_id) for artifact_id in artifact_ids])
        index = self._index()
        index.difference_update(artifact_ids)
        self._save_index(index)

    def _index(self) -> set[str]:
        return set(self.cache.get(INDEX_KEY) or [])

    def _save_index(self, index: set[str]) -> None:
        self.cache.set(INDEX_KEY, sorted(index), None)

    @staticmethod
    def _key(artifact_id: uuid.UUID | str) -> str:
        return f"{KEY_PREFIX}:{artifact_id}"


__all__ = ["ArtifactCatalogCache", "summarise_artifact"]
