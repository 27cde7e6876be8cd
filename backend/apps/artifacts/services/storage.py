"""Object storage for uploaded specimen photographs."""

from __future__ import annotations

import logging

from django.core.files.base import ContentFile
from django.core.files.storage import Storage, storages

logger = logging.getLogger(__name__)

ARTIFACT_STORAGE_ALIAS = "artifacts"

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class ArtifactImageStore:
    """Thin wrapper over the ``artifacts`` storage alias."""

    def __init__(self, storage: Storage | None = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> Storage:
        if self._storage is None:
            self._storage = storages[ARTIFACT_STORAGE_ALIAS]
        return self._storage

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Write ``data`` at ``path``, replacing any existing object."""

        if self.storage.exists(path):
            self.storage.delete(path)
        content = ContentFile(data)
        content.content_type = content_type
        saved = self.storage.save(path, content)
        logger.debug("Stored %s bytes at %s", len(data), saved)
        return saved

    def public_url(self, path: str) -> str:
        return self.storage.url(path)

    def delete(self, path: str) -> None:
        self.storage.delete(path)


def extension_for(content_type: str) -> str:
    return _EXTENSIONS.get(content_type, "jpg")


__all__ = ["ARTIFACT_STORAGE_ALIAS", "ArtifactImageStore", "extension_for"]
