"""Tests for the artifact analysis pipeline."""

from __future__ import annotations

import base64
import uuid
from unittest.mock import patch

import pytest
from django.core.files.storage import FileSystemStorage
from django.db import DatabaseError

from apps.artifacts import models
from apps.artifacts.services.analysis import (
    AnalysisFailedError,
    AnalysisInput,
    NoImagesProvidedError,
    analyze_artifact,
)
from apps.artifacts.services.catalog import SearchResult
from apps.artifacts.services.openrouter import OpenRouterCredentials, normalise_report
from apps.artifacts.services.storage import ArtifactImageStore
from apps.core.models import ANONYMOUS_OWNER_ID

JPEG = base64.b64encode(b"\xff\xd8\xff\xe0 fake jpeg bytes").decode("ascii")
PNG = base64.b64encode(b"\x89PNG\r\n\x1a\n fake png bytes").decode("ascii")
CREDENTIALS = OpenRouterCredentials(api_key="test-key")

REPORT = normalise_report(
    {
        "title": "Gold Funerary Mask",
        "classification": "Ceremonial Gold Funerary Mask",
        "visualDescription": "Hammered gold sheet with inlaid eyes",
        "materialAnalysis": "Gold, lapis lazuli",
        "culturalContext": "Egyptian, circa 1323 BCE",
        "geographicSignificance": "Thebes, Egypt",
        "confidenceScore": 0.9,
    }
)
SIMILAR = [
    SearchResult(id="si-1", title="Mask", record_url="https://si.example/1", match_score=1.0),
]


class FlakyStore(ArtifactImageStore):
    """Storage double that rejects uploads for selected submission indexes."""

    def __init__(self, storage, failing_indexes=()):
        super().__init__(storage)
        self.failing_indexes = set(failing_indexes)
        self.uploaded_paths: list[str] = []

    def upload(self, path, data, content_type):
        index = int(path.rsplit("/", 1)[1].split(".")[0])
        if index in self.failing_indexes:
            raise OSError(f"bucket rejected {path}")
        self.uploaded_paths.append(path)
        return super().upload(path, data, content_type)


@pytest.fixture()
def store(tmp_path):
    return FlakyStore(FileSystemStorage(location=tmp_path, base_url="/media/artifacts/"))


@pytest.fixture()
def pipeline(settings):
    settings.SMITHSONIAN_API_KEY = None
    with (
        patch(
            "apps.artifacts.services.analysis.describe_image",
            return_value="A gold mask, heavily burnished.",
        ) as mock_describe,
        patch(
            "apps.artifacts.services.analysis.generate_report",
            return_value=REPORT,
        ) as mock_report,
        patch(
            "apps.artifacts.services.analysis.search_similar_artifacts",
            return_value=SIMILAR,
        ) as mock_search,
    ):
        yield {"describe": mock_describe, "report": mock_report, "search": mock_search}


@pytest.mark.django_db()
def test_no_images_is_rejected_without_side_effects(pipeline, store):
    with pytest.raises(NoImagesProvidedError):
        analyze_artifact(AnalysisInput(images=[]), store=store, credentials=CREDENTIALS)

    assert models.Artifact.objects.count() == 0
    pipeline["describe"].assert_not_called()
    assert store.uploaded_paths == []


@pytest.mark.django_db()
def test_successful_analysis_persists_artifact_and_images(pipeline, store):
    outcome = analyze_artifact(
        AnalysisInput(images=[JPEG, PNG], notes="Layer VII", location=(25.7, 32.6)),
        store=store,
        credentials=CREDENTIALS,
    )

    artifact = models.Artifact.objects.get()
    assert outcome.artifact_created is True
    assert artifact.owner_id == ANONYMOUS_OWNER_ID
    assert artifact.title == "Gold Funerary Mask"
    assert artifact.description == (
        "Hammered gold sheet with inlaid eyes\n\nA gold mask, heavily burnished."
    )
    assert artifact.era == "Egyptian, circa 1323 BCE"
    assert artifact.region == "Thebes, Egypt"
    assert (artifact.latitude, artifact.longitude) == (25.7, 32.6)
    assert artifact.excavation_notes == "Layer VII"
    assert artifact.confidence_score == pytest.approx(0.9)
    assert artifact.status == models.ArtifactStatus.STABLE
    assert artifact.ai_report["similarArtifacts"][0]["id"] == "si-1"
    assert artifact.ai_report["confidenceScore"] == pytest.approx(0.9)

    assert store.uploaded_paths == [f"{artifact.id}/0.jpg", f"{artifact.id}/1.png"]
    images = list(artifact.images.order_by("position"))
    assert [image.is_primary for image in images] == [True, False]
    assert outcome.primary_image_url == images[0].image_url
    assert outcome.report_payload()["image_urls"] == [image.image_url for image in images]

    cache = models.SimilarArtifactsCache.objects.get(artifact=artifact)
    assert cache.results[0]["recordUrl"] == "https://si.example/1"

    # The vision output feeds the report prompt.
    assert pipeline["report"].call_args.kwargs["vision_description"] == (
        "A gold mask, heavily burnished."
    )
    pipeline["describe"].assert_called_once()
    assert pipeline["describe"].call_args.args[0] == JPEG


@pytest.mark.django_db()
def test_one_failed_upload_still_succeeds(pipeline, store):
    store.failing_indexes = {1}

    outcome = analyze_artifact(
        AnalysisInput(images=[JPEG, JPEG, JPEG]),
        store=store,
        credentials=CREDENTIALS,
    )

    images = list(models.ArtifactImage.objects.order_by("position"))
    assert len(images) == 2
    assert [image.position for image in images] == [0, 2]
    assert [image.is_primary for image in images] == [True, False]
    assert outcome.report_payload()["image_url"] == images[0].image_url
    assert [failed.index for failed in outcome.images_failed] == [1]
    assert "bucket rejected" in outcome.images_failed[0].reason


@pytest.mark.django_db()
def test_primary_moves_to_first_stored_image(pipeline, store):
    store.failing_indexes = {0}

    outcome = analyze_artifact(
        AnalysisInput(images=[JPEG, JPEG]),
        store=store,
        credentials=CREDENTIALS,
    )

    image = models.ArtifactImage.objects.get()
    assert image.position == 1
    assert image.is_primary is True
    assert outcome.primary_image_url == image.image_url


@pytest.mark.django_db()
def test_all_uploads_failing_still_reports_artifact(pipeline, store):
    store.failing_indexes = {0, 1}

    outcome = analyze_artifact(
        AnalysisInput(images=[JPEG, JPEG]),
        store=store,
        credentials=CREDENTIALS,
    )

    assert models.Artifact.objects.count() == 1
    assert models.ArtifactImage.objects.count() == 0
    assert outcome.primary_image_url is None
    assert len(outcome.images_failed) == 2


@pytest.mark.django_db()
def test_artifact_insert_failure_writes_no_images(pipeline, store):
    with patch(
        "apps.artifacts.services.analysis._persist_artifact",
        side_effect=DatabaseError("insert refused"),
    ):
        with pytest.raises(AnalysisFailedError) as excinfo:
            analyze_artifact(
                AnalysisInput(images=[JPEG, PNG]),
                store=store,
                credentials=CREDENTIALS,
            )

    assert excinfo.value.detail == "insert refused"
    assert models.ArtifactImage.objects.count() == 0
    assert store.uploaded_paths == []


@pytest.mark.django_db()
def test_vision_failure_aborts_before_persistence(pipeline, store):
    pipeline["describe"].side_effect = RuntimeError("provider returned 502")

    with pytest.raises(AnalysisFailedError, match="provider returned 502"):
        analyze_artifact(AnalysisInput(images=[JPEG]), store=store, credentials=CREDENTIALS)

    assert models.Artifact.objects.count() == 0
    pipeline["report"].assert_not_called()


@pytest.mark.django_db()
def test_catalogue_failure_does_not_abort(pipeline, store):
    pipeline["search"].side_effect = RuntimeError("catalogue exploded")

    outcome = analyze_artifact(AnalysisInput(images=[JPEG]), store=store, credentials=CREDENTIALS)

    assert [result.id for result in outcome.similar_artifacts] == ["mock-1", "mock-2", "mock-3"]


@pytest.mark.django_db()
def test_invalid_base64_is_recorded_as_failed_image(pipeline, store):
    outcome = analyze_artifact(
        AnalysisInput(images=[JPEG, "%%%not-base64%%%"]),
        store=store,
        credentials=CREDENTIALS,
    )

    assert [image.index for image in outcome.images_attached] == [0]
    assert outcome.images_failed[0].index == 1
    assert outcome.images_failed[0].reason.startswith("Invalid image data")


@pytest.mark.django_db()
def test_data_urls_and_owner_are_honoured(pipeline, store):
    owner = uuid.uuid4()

    outcome = analyze_artifact(
        AnalysisInput(images=[f"data:image/jpeg;base64,{JPEG}"], owner_id=owner),
        store=store,
        credentials=CREDENTIALS,
    )

    assert outcome.artifact.owner_id == owner
    assert pipeline["describe"].call_args.args[0] == JPEG
    assert len(outcome.images_attached) == 1


@pytest.mark.django_db()
def test_image_row_failure_removes_uploaded_object(pipeline, store):
    with patch.object(
        models.ArtifactImage.objects,
        "create",
        side_effect=DatabaseError("row refused"),
    ):
        outcome = analyze_artifact(
            AnalysisInput(images=[JPEG]), store=store, credentials=CREDENTIALS
        )

    assert outcome.images_attached == []
    assert outcome.images_failed[0].reason == "row refused"
    assert store.uploaded_paths == [f"{outcome.artifact.id}/0.jpg"]
    assert not store.storage.exists(store.uploaded_paths[0])


@pytest.mark.django_db()
def test_similar_cache_write_failure_still_returns_outcome(pipeline, store):
    with patch.object(
        models.SimilarArtifactsCache.objects,
        "update_or_create",
        side_effect=DatabaseError("cache table down"),
    ):
        outcome = analyze_artifact(
            AnalysisInput(images=[JPEG]), store=store, credentials=CREDENTIALS
        )

    assert outcome.artifact_created is True
    assert len(outcome.images_attached) == 1
    assert models.SimilarArtifactsCache.objects.count() == 0


@pytest.mark.django_db()
def test_failed_cleanup_does_not_stop_remaining_images(pipeline, store):
    real_create = models.ArtifactImage.objects.create

    def create(**kwargs):
        if kwargs["position"] == 0:
            raise DatabaseError("row refused")
        return real_create(**kwargs)

    with (
        patch.object(models.ArtifactImage.objects, "create", side_effect=create),
        patch.object(store, "delete", side_effect=OSError("bucket delete refused")),
    ):
        outcome = analyze_artifact(
            AnalysisInput(images=[JPEG, JPEG, JPEG]), store=store, credentials=CREDENTIALS
        )

    assert [image.index for image in outcome.images_attached] == [1, 2]
    assert [image.is_primary for image in outcome.images_attached] == [True, False]
    assert [failed.index for failed in outcome.images_failed] == [0]
    assert outcome.images_failed[0].reason == "row refused"


@pytest.mark.django_db()
def test_line_wrapped_base64_is_accepted(pipeline, store):
    wrapped = "\n".join(JPEG[i : i + 8] for i in range(0, len(JPEG), 8))

    outcome = analyze_artifact(
        AnalysisInput(images=[wrapped]), store=store, credentials=CREDENTIALS
    )

    assert outcome.images_failed == []
    assert len(outcome.images_attached) == 1
