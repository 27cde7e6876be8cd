"""Services package for the artifact domain."""

from .analysis import (
    AnalysisFailedError,
    AnalysisInput,
    AnalysisOutcome,
    NoImagesProvidedError,
    analyze_artifact,
)
from .catalog import SearchParams, SearchResult, search_similar_artifacts
from .catalog_cache import ArtifactCatalogCache
from .openrouter import AIReport, OpenRouterCredentials, stream_assistant_reply
from .storage import ArtifactImageStore

__all__ = [
    "AIReport",
    "AnalysisFailedError",
    "AnalysisInput",
    "AnalysisOutcome",
    "ArtifactCatalogCache",
    "ArtifactImageStore",
    "NoImagesProvidedError",
    "OpenRouterCredentials",
    "SearchParams",
    "SearchResult",
    "analyze_artifact",
    "search_similar_artifacts",
    "stream_assistant_reply",
]
