"""Tests for the read-through vault catalogue cache."""

from __future__ import annotations

import uuid

import pytest
from django.core.cache import cache

from apps.artifacts import models
from apps.artifacts.services.catalog_cache import ArtifactCatalogCache


def _artifact(**overrides) -> models.Artifact:
    values = {"title": "Votive Figurine", "classification": "Terracotta idol"}
    values.update(overrides)
    return models.Artifact.objects.create(**values)


@pytest.mark.django_db()
def test_get_reads_through_to_database_and_caches():
    artifact = _artifact()
    catalog = ArtifactCatalogCache(timeout=60)

    entry = catalog.get(artifact.id)

    assert entry["title"] == "Votive Figurine"
    assert cache.get(f"artifact-catalog:{artifact.id}") == entry


@pytest.mark.django_db()
def test_get_unknown_id_returns_none():
    assert ArtifactCatalogCache(timeout=60).get(uuid.uuid4()) is None


@pytest.mark.django_db()
def test_cached_entries_are_never_written_back():
    artifact = _artifact()
    catalog = ArtifactCatalogCache(timeout=60)
    catalog.remember(artifact)

    cache.set(f"artifact-catalog:{artifact.id}", {"id": str(artifact.id), "title": "Tampered"})
    catalog.load()

    artifact.refresh_from_db()
    assert artifact.title == "Votive Figurine"
    assert catalog.get(artifact.id)["title"] == "Votive Figurine"


@pytest.mark.django_db()
def test_load_refreshes_and_evicts_ids_missing_from_database():
    kept = _artifact(title="Kept")
    removed = _artifact(title="Removed")
    catalog = ArtifactCatalogCache(timeout=60)
    catalog.load()

    models.Artifact.objects.filter(pk=kept.pk).update(title="Kept and renamed")
    models.Artifact.objects.filter(pk=removed.pk).delete()

    entries = catalog.load()

    assert [entry["title"] for entry in entries] == ["Kept and renamed"]
    assert cache.get(f"artifact-catalog:{removed.id}") is None
    assert str(removed.id) not in cache.get("artifact-catalog:index")


@pytest.mark.django_db()
def test_owner_scoped_load_leaves_other_owners_alone():
    owner, other = uuid.uuid4(), uuid.uuid4()
    mine = _artifact(owner_id=owner)
    theirs = _artifact(owner_id=other)
    catalog = ArtifactCatalogCache(timeout=60)
    catalog.load()

    entries = catalog.load(owner_id=owner)

    assert [entry["id"] for entry in entries] == [str(mine.id)]
    assert cache.get(f"artifact-catalog:{theirs.id}") is not None

