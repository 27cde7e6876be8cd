"""REST API endpoints for artifact analysis and the vault dashboards."""

from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.urls import include, path
from rest_framework import mixins, routers, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.artifacts import atlas, models, serializers
from apps.artifacts.services.analysis import (
    AnalysisFailedError,
    AnalysisInput,
    NoImagesProvidedError,
    analyze_artifact,
    cross_reference,
)
from apps.artifacts.services.catalog import SearchParams, search_similar_artifacts
from apps.artifacts.services.catalog_cache import ArtifactCatalogCache
from apps.artifacts.services.openrouter import normalise_report

logger = logging.getLogger(__name__)

app_name = "artifacts"

DEFAULT_DISCOVERY_QUERY = "archaeology"
DEFAULT_ATLAS_YEAR = -1200


def _error(error: str, details, status_code: int) -> Response:
    return Response({"error": error, "details": details}, status=status_code)


def _parse_owner(raw: str | None) -> uuid.UUID | None:
    if not raw:
        return None
    return uuid.UUID(raw)


class AnalyzeView(APIView):
    """Run the analysis pipeline over uploaded specimen photographs."""

    def post(self, request, *args, **kwargs):
        serializer = serializers.AnalyzeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _error("Invalid request", serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        location = data.get("location")
        analysis_input = AnalysisInput(
            images=data.get("images") or [],
            notes=data.get("notes") or None,
            location=(location["lat"], location["lng"]) if location else None,
            owner_id=data.get("userId"),
        )

        try:
            outcome = analyze_artifact(analysis_input)
        except NoImagesProvidedError as exc:
            return _error("No images provided", str(exc), status.HTTP_400_BAD_REQUEST)
        except AnalysisFailedError as exc:
            return _error(
                "Analysis Protocol Failed",
                exc.detail,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        try:
            ArtifactCatalogCache().remember(outcome.artifact)
        except Exception:  # pragma: no cover - cache backend outage
            logger.exception("Failed to cache catalogue entry for %s", outcome.artifact.id)

        return Response(
            {
                "success": True,
                "artifactId": str(outcome.artifact.id),
                "report": outcome.report_payload(),
                "images": {
                    "attached": [
                        {"index": image.index, "url": image.url, "is_primary": image.is_primary}
                        for image in outcome.images_attached
                    ],
                    "failed": [
                        {"index": image.index, "reason": image.reason}
                        for image in outcome.images_failed
                    ],
                },
            },
            status=status.HTTP_201_CREATED,
        )


class DiscoverySearchView(APIView):
    def get(self, request, *args, **kwargs):
        serializer = serializers.DiscoveryQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        query = serializer.validated_data.get("q") or DEFAULT_DISCOVERY_QUERY

        params = SearchParams(
            keywords=[query],
            material=serializer.validated_data.get("material") or None,
            culture=serializer.validated_data.get("culture") or None,
        )
        try:
            results = search_similar_artifacts(
                params,
                api_key=settings.SMITHSONIAN_API_KEY,
                base_url=settings.SMITHSONIAN_BASE_URL,
            )
        except Exception as exc:
            logger.exception("Discovery search failed")
            return _error(
                "Discovery Protocol Failed",
                str(exc),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"success": True, "results": [result.as_payload() for result in results]})


class ArtifactPagination(PageNumberPagination):
    page_size = 20
    max_page_size = 50


class ArtifactViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = serializers.ArtifactSerializer
    pagination_class = ArtifactPagination
    http_method_names = ["get", "patch", "head", "options"]

    def get_queryset(self):
        queryset = models.Artifact.objects.prefetch_related("images").order_by("-created_at")
        if self.action != "list":
            return queryset

        owner = self.request.query_params.get("owner")
        if owner:
            try:
                queryset = queryset.filter(owner_id=_parse_owner(owner))
            except ValueError:
                return queryset.none()
        artifact_status = self.request.query_params.get("status")
        if artifact_status:
            queryset = queryset.filter(status=artifact_status)
        return queryset

    def get_serializer_class(self):
        if self.action == "list":
            return serializers.ArtifactSummarySerializer
        if self.action == "partial_update":
            return serializers.ArtifactUpdateSerializer
        return serializers.ArtifactSerializer

    def partial_update(self, request, *args, **kwargs):
        artifact = self.get_object()
        serializer = serializers.ArtifactUpdateSerializer(artifact, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        artifact = self.get_queryset().get(pk=artifact.pk)
        ArtifactCatalogCache().remember(artifact)
        return Response(serializers.ArtifactSerializer(artifact).data)

    @action(detail=True, methods=["get"], url_path="similar")
    def similar(self, request, pk=None):
        artifact = self.get_object()
        refresh = request.query_params.get("refresh") in {"1", "true", "yes"}

        cached = models.SimilarArtifactsCache.objects.filter(artifact=artifact).first()
        if cached is not None and not refresh:
            return Response(
                {
                    "artifactId": str(artifact.id),
                    "results": cached.results,
                    "cachedAt": cached.cached_at,
                }
            )

        if not refresh:
            results = (artifact.ai_report or {}).get("similarArtifacts") or []
            return Response({"artifactId": str(artifact.id), "results": results, "cachedAt": None})

        report = normalise_report(artifact.ai_report)
        results = [result.as_payload() for result in cross_reference(report)]
        cached, _ = models.SimilarArtifactsCache.objects.update_or_create(
            artifact=artifact,
            defaults={"results": results},
        )
        return Response(
            {"artifactId": str(artifact.id), "results": results, "cachedAt": cached.cached_at}
        )

    @action(detail=False, methods=["get"], url_path="catalog")
    def catalog(self, request):
        try:
            owner_id = _parse_owner(request.query_params.get("owner"))
        except ValueError:
            return _error("Invalid owner", "owner must be a UUID", status.HTTP_400_BAD_REQUEST)

        entries = ArtifactCatalogCache().load(owner_id=owner_id)
        return Response({"results": entries})


class AtlasView(APIView):
    def get(self, request, *args, **kwargs):
        raw_year = request.query_params.get("year")
        try:
            year = int(raw_year) if raw_year not in (None, "") else DEFAULT_ATLAS_YEAR
        except (TypeError, ValueError):
            return _error("Invalid year", "year must be an integer", status.HTTP_400_BAD_REQUEST)

        artifacts = models.Artifact.objects.prefetch_related("images").exclude(
            latitude__isnull=True
        ).exclude(longitude__isnull=True)
        return Response(atlas.atlas_snapshot(year, artifacts))


router = routers.DefaultRouter()
router.register("artifacts", ArtifactViewSet, basename="artifact")

urlpatterns = [
    path("analyze/", AnalyzeView.as_view(), name="analyze"),
    path("discovery/search/", DiscoverySearchView.as_view(), name="discovery-search"),
    path("atlas/", AtlasView.as_view(), name="atlas"),
    path("", include(router.urls)),
]
