"""Shared pytest fixtures for the backend apps."""

from __future__ import annotations

import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def artifact_storage(settings, tmp_path):
    """Keep uploaded photographs out of the working tree."""

    storages = dict(settings.STORAGES)
    storages["artifacts"] = {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {"location": str(tmp_path / "artifacts"), "base_url": "/media/artifacts/"},
    }
    settings.STORAGES = storages
    return tmp_path / "artifacts"


@pytest.fixture(autouse=True)
def no_external_services(settings):
    settings.POSTHOG_PROJECT_API_KEY = None
    settings.SMITHSONIAN_API_KEY = None
