"""Artifact analysis pipeline: vision, report, catalogue cross-reference, persistence."""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from django.conf import settings
from django.db import DatabaseError

from apps.artifacts import models
from apps.artifacts.services.catalog import (
    SearchResult,
    build_search_params,
    mock_results,
    search_similar_artifacts,
)
from apps.artifacts.services.openrouter import (
    AIReport,
    OpenRouterCredentials,
    describe_image,
    generate_report,
    image_mime_type,
)
from apps.artifacts.services.storage import ArtifactImageStore, extension_for
from apps.core.models import ANONYMOUS_OWNER_ID
from apps.core.posthog import build_langchain_callbacks, capture_exception

logger = logging.getLogger(__name__)


class NoImagesProvidedError(ValueError):
    """Raised before any side effect when the submission carries no images."""


class AnalysisFailedError(Exception):
    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


@dataclass(frozen=True)
class AnalysisInput:
    images: Sequence[str]
    notes: Optional[str] = None
    location: Optional[tuple[float, float]] = None
    owner_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class AttachedImage:
    index: int
    url: str
    is_primary: bool


@dataclass(frozen=True)
class FailedImage:
    index: int
    reason: str


@dataclass
class AnalysisOutcome:
    """Result of one analysis run.

    The artifact row always exists once an outcome is returned; the image set is
    the subset of submitted images that were stored and registered.
    """

    artifact: models.Artifact
    report: AIReport
    vision_description: str
    similar_artifacts: list[SearchResult]
    images_attached: list[AttachedImage] = field(default_factory=list)
    images_failed: list[FailedImage] = field(default_factory=list)

    @property
    def artifact_created(self) -> bool:
        return self.artifact.pk is not None

    @property
    def primary_image_url(self) -> Optional[str]:
        for image in self.images_attached:
            if image.is_primary:
                return image.url
        return None

    @property
    def image_urls(self) -> list[str]:
        return [image.url for image in self.images_attached]

    def report_payload(self) -> dict[str, Any]:
        payload = self.report.as_payload()
        payload["similarArtifacts"] = [result.as_payload() for result in self.similar_artifacts]
        payload["image_url"] = self.primary_image_url
        payload["image_urls"] = self.image_urls
        return payload


def analyze_artifact(
    analysis_input: AnalysisInput,
    *,
    store: ArtifactImageStore | None = None,
    credentials: OpenRouterCredentials | None = None,
) -> AnalysisOutcome:
    """Run the full pipeline for one submission.

    Steps up to and including the artifact insert are all-or-nothing and raise
    ``AnalysisFailedError``. Image uploads afterwards are best effort per image.
    """

    images = [strip_data_url(image) for image in analysis_input.images]
    if not images:
        raise NoImagesProvidedError("No images provided")

    credentials = credentials or OpenRouterCredentials.from_settings()
    owner_id = analysis_input.owner_id or ANONYMOUS_OWNER_ID
    trace_id = str(uuid.uuid4())
    properties = {
        "image_count": len(images),
        "has_notes": bool(analysis_input.notes),
        "has_location": analysis_input.location is not None,
    }
    callbacks = build_langchain_callbacks(
        distinct_id=str(owner_id),
        trace_id=trace_id,
        properties=properties,
    )

    try:
        vision_description = describe_image(
            images[0],
            credentials=credentials,
            model=settings.OPENROUTER_VISION_MODEL,
            callbacks=callbacks,
        )
        report = generate_report(
            images=images,
            notes=analysis_input.notes,
            location=analysis_input.location,
            credentials=credentials,
            vision_description=vision_description,
            model=settings.OPENROUTER_REPORT_MODEL,
            callbacks=callbacks,
        )
        similar_artifacts = cross_reference(report)
        artifact = _persist_artifact(
            report=report,
            vision_description=vision_description,
            similar_artifacts=similar_artifacts,
            analysis_input=analysis_input,
            owner_id=owner_id,
        )
    except Exception as exc:
        logger.exception("Artifact analysis failed before persistence")
        capture_exception(
            exc,
            distinct_id=str(owner_id),
            properties={**properties, "trace_id": trace_id},
        )
        raise AnalysisFailedError(str(exc) or exc.__class__.__name__) from exc

    outcome = AnalysisOutcome(
        artifact=artifact,
        report=report,
        vision_description=vision_description,
        similar_artifacts=similar_artifacts,
    )
    _attach_images(outcome, images, store or ArtifactImageStore())

    try:
        models.SimilarArtifactsCache.objects.update_or_create(
            artifact=artifact,
            defaults={"results": [result.as_payload() for result in similar_artifacts]},
        )
    except Exception:
        # The matches are already on ai_report; the cache row is rebuilt by ?refresh=1.
        logger.exception("Failed to cache similar artifacts for %s", artifact.id)

    logger.info(
        "Analysed artifact %s: %s image(s) attached, %s failed",
        artifact.id,
        len(outcome.images_attached),
        len(outcome.images_failed),
    )
    return outcome


def cross_reference(report: AIReport) -> list[SearchResult]:
    """Catalogue matches for a report; never raises."""

    try:
        return search_similar_artifacts(
            build_search_params(report),
            api_key=settings.SMITHSONIAN_API_KEY,
            base_url=settings.SMITHSONIAN_BASE_URL,
        )
    except Exception:
        logger.exception("Catalogue cross-reference failed; using mock matches")
        return mock_results()


def strip_data_url(image: str) -> str:
    """Accept both bare base64 and ``data:<mime>;base64,`` URLs."""

    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


def _persist_artifact(
    *,
    report: AIReport,
    vision_description: str,
    similar_artifacts: list[SearchResult],
    analysis_input: AnalysisInput,
    owner_id: uuid.UUID,
) -> models.Artifact:
    ai_report = report.as_payload()
    ai_report["similarArtifacts"] = [result.as_payload() for result in similar_artifacts]

    latitude, longitude = analysis_input.location or (None, None)
    return models.Artifact.objects.create(
        owner_id=owner_id,
        title=report.title[:255],
        classification=report.classification[:255],
        description=f"{report.visual_description}\n\n{vision_description}",
        material=report.material_analysis,
        era=report.cultural_context,
        region=report.geographic_significance,
        latitude=latitude,
        longitude=longitude,
        excavation_notes=analysis_input.notes or "",
        ai_report=ai_report,
        confidence_score=report.confidence_score,
        status=models.ArtifactStatus.STABLE,
    )


def _attach_images(
    outcome: AnalysisOutcome,
    images: Sequence[str],
    store: ArtifactImageStore,
) -> None:
    # Primary goes to the first image that makes it into storage, in submission order.
    for index, image in enumerate(images):
        try:
            # Line-wrapped (MIME-style) base64 is accepted.
            data = base64.b64decode("".join(image.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.warning(
                "Image %s for artifact %s is not valid base64", index, outcome.artifact.id
            )
            outcome.images_failed.append(
                FailedImage(index=index, reason=f"Invalid image data: {exc}")
            )
            continue
        if not data:
            outcome.images_failed.append(FailedImage(index=index, reason="Empty image data"))
            continue

        content_type = image_mime_type(image)
        path = f"{outcome.artifact.id}/{index}.{extension_for(content_type)}"
        try:
            stored_path = store.upload(path, data, content_type)
            url = store.public_url(stored_path)
        except Exception as exc:
            logger.exception(
                "Failed to upload image %s for artifact %s", index, outcome.artifact.id
            )
            outcome.images_failed.append(FailedImage(index=index, reason=str(exc)))
            continue

        is_primary = not outcome.images_attached
        try:
            models.ArtifactImage.objects.create(
                artifact=outcome.artifact,
                image_url=url,
                storage_path=stored_path,
                position=index,
                is_primary=is_primary,
            )
        except DatabaseError as exc:
            logger.exception(
                "Failed to record image %s for artifact %s", index, outcome.artifact.id
            )
            # Don't leave an object in the bucket that no row points at.
            try:
                store.delete(stored_path)
            except Exception:
                logger.exception("Failed to remove orphaned upload %s", stored_path)
            outcome.images_failed.append(FailedImage(index=index, reason=str(exc)))
            continue

        outcome.images_attached.append(AttachedImage(index=index, url=url, is_primary=is_primary))


__all__ = [
    "AnalysisFailedError",
    "AnalysisInput",
    "AnalysisOutcome",
    "AttachedImage",
    "FailedImage",
    "NoImagesProvidedError",
    "analyze_artifact",
    "cross_reference",
    "strip_data_url",
]
