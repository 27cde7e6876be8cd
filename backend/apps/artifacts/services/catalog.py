"""Museum catalogue cross-referencing against the Smithsonian Open Access API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from apps.artifacts.services.openrouter import AIReport

logger = logging.getLogger(__name__)

DEFAULT_SMITHSONIAN_BASE_URL = "https://api.si.edu/openaccess/api/v1.0"
SEARCH_PAGE_SIZE = 20
DEFAULT_QUERY = "archaeology artifact"

KEYWORD_STOPWORDS = frozenset({"about", "these", "their", "which", "would", "could"})
MAX_KEYWORDS = 5
REGIONS = ("Egypt", "Greece", "Rome", "Mesopotamia", "Persia", "China", "Maya", "Aztec", "Inca")
CULTURES = (
    "Egyptian",
    "Greek",
    "Roman",
    "Sumerian",
    "Babylonian",
    "Persian",
    "Celtic",
    "Viking",
    "Mayan",
)
_ERA_PATTERN = re.compile(r"(\d+)\s*(BCE|BC|CE|AD)", re.IGNORECASE)


class SearchResult(BaseModel):
    """A candidate match from the external catalogue."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    era: Optional[str] = None
    region: Optional[str] = None
    culture: Optional[str] = None
    material: Optional[str] = None
    object_type: Optional[str] = None
    record_url: str
    match_score: float

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class SearchParams:
    material: Optional[str] = None
    era: Optional[str] = None
    region: Optional[str] = None
    culture: Optional[str] = None
    object_type: Optional[str] = None
    keywords: list[str] = field(default_factory=list)


class CatalogRecordError(ValueError):
    """A catalogue row could not be read into a SearchResult."""


# --- External record schema -------------------------------------------------
# Only the fields we read are declared; everything else in the payload is ignored.


class _TextEntry(BaseModel):
    content: Optional[str] = None


class _Media(BaseModel):
    content: Optional[str] = None
    thumbnail: Optional[str] = None


class _OnlineMedia(BaseModel):
    media: list[_Media] = Field(default_factory=list)

    @field_validator("media", mode="before")
    @classmethod
    def _only_objects(cls, value: Any) -> list[Any]:
        return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


class _Descriptive(BaseModel):
    title: Optional[_TextEntry] = None
    record_link: Optional[str] = None
    online_media: Optional[_OnlineMedia] = None

    @field_validator("title", "online_media", mode="before")
    @classmethod
    def _object_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("record_link", mode="before")
    @classmethod
    def _string_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class _FreeText(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: list[_TextEntry] = Field(default_factory=list)
    place: list[_TextEntry] = Field(default_factory=list)
    culture: list[_TextEntry] = Field(default_factory=list)
    object_type: list[_TextEntry] = Field(default_factory=list, alias="objectType")

    @field_validator("date", "place", "culture", "object_type", mode="before")
    @classmethod
    def _only_objects(cls, value: Any) -> list[Any]:
        return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


class _IndexedStructured(BaseModel):
    date: list[str] = Field(default_factory=list)
    place: list[str] = Field(default_factory=list)
    culture: list[str] = Field(default_factory=list)
    object_type: list[str] = Field(default_factory=list)
    material: list[str] = Field(default_factory=list)

    @field_validator("date", "place", "culture", "object_type", "material", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> list[str]:
        return [item for item in value if isinstance(item, str)] if isinstance(value, list) else []


class _RecordContent(BaseModel):
    descriptive: Optional[_Descriptive] = Field(default=None, alias="descriptiveNonRepeating")
    freetext: Optional[_FreeText] = None
    indexed: Optional[_IndexedStructured] = Field(default=None, alias="indexedStructured")

    @field_validator("descriptive", "freetext", "indexed", mode="before")
    @classmethod
    def _object_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class _CatalogRecord(BaseModel):
    id: str = Field(min_length=1)
    title: Optional[str] = None
    content: Optional[_RecordContent] = None

    @field_validator("title", mode="before")
    @classmethod
    def _string_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("content", mode="before")
    @classmethod
    def _object_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


# --- Search -----------------------------------------------------------------


def search_similar_artifacts(
    params: SearchParams,
    *,
    api_key: str | None,
    base_url: str = DEFAULT_SMITHSONIAN_BASE_URL,
    transport: httpx.BaseTransport | None = None,
) -> list[SearchResult]:
    """Query the catalogue; any failure degrades to the fixed mock candidates."""

    if not api_key:
        logger.warning("Smithsonian API key not configured, returning mock data")
        return mock_results()

    query = build_query(params)
    try:
        with httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=15,
            transport=transport,
        ) as client:
            response = client.get(
                "/search",
                params={
                    "api_key": api_key,
                    "q": query,
                    "rows": SEARCH_PAGE_SIZE,
                    "start": 0,
                },
            )
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Smithsonian search failed: %s", exc)
        return mock_results()

    rows = _extract_rows(payload)
    if rows is None:
        logger.error("Smithsonian search returned an unexpected envelope")
        return mock_results()

    results: list[SearchResult] = []
    for index, item in enumerate(rows):
        try:
            results.append(parse_catalog_record(item, index, len(rows)))
        except CatalogRecordError as exc:
            logger.warning("Skipping catalogue row %s: %s", index, exc)
    return results


def build_query(params: SearchParams) -> str:
    query_parts: list[str] = []
    if params.keywords:
        query_parts.append(" ".join(params.keywords))
    if params.material:
        query_parts.append(f"material:{params.material}")
    if params.culture:
        query_parts.append(f"culture:{params.culture}")
    if params.object_type:
        query_parts.append(f"object_type:{params.object_type}")
    if params.region:
        query_parts.append(f"place:{params.region}")
    return " AND ".join(query_parts) or DEFAULT_QUERY


def parse_catalog_record(item: Any, index: int, total: int) -> SearchResult:
    """Validate one raw catalogue row and map it onto the uniform result shape."""

    if not isinstance(item, dict):
        raise CatalogRecordError("record is not an object")
    try:
        record = _CatalogRecord.model_validate(item)
    except ValidationError as exc:
        raise CatalogRecordError(f"record failed validation: {exc.error_count()} error(s)") from exc

    content = record.content or _RecordContent()
    descriptive = content.descriptive or _Descriptive()
    freetext = content.freetext or _FreeText()
    indexed = content.indexed or _IndexedStructured()

    image_url = None
    thumbnail_url = None
    if descriptive.online_media and descriptive.online_media.media:
        media = descriptive.online_media.media[0]
        image_url = media.content or None
        thumbnail_url = media.thumbnail or None

    title = (descriptive.title.content if descriptive.title else None) or record.title

    return SearchResult(
        id=record.id,
        title=title or "Untitled Artifact",
        image_url=image_url,
        thumbnail_url=thumbnail_url,
        era=_first(indexed.date) or _first_text(freetext.date),
        region=_first(indexed.place) or _first_text(freetext.place),
        culture=_first(indexed.culture) or _first_text(freetext.culture),
        material=_first(indexed.material),
        object_type=_first(indexed.object_type) or _first_text(freetext.object_type),
        record_url=descriptive.record_link
        or f"https://collections.si.edu/search/detail/{record.id}",
        match_score=match_score(index, total),
    )


def match_score(index: int, total: int) -> float:
    """Rank-based score: 1.0 for the first row, approaching 0.5 for the last."""

    if total <= 0:
        return 1.0
    return 1 - (index / total) * 0.5


def mock_results() -> list[SearchResult]:
    return [
        SearchResult(
            id="mock-1",
            title="Tutankhamun-Era Funerary Mask",
            era="1323 BCE",
            region="Egypt",
            culture="Ancient Egyptian",
            material="22k Gold, Lapis Lazuli",
            object_type="Funerary Mask",
            record_url="#",
            match_score=0.92,
        ),
        SearchResult(
            id="mock-2",
            title="Mycenaean Terracotta Kylix",
            era="1400 BCE",
            region="Greece",
            culture="Mycenaean",
            material="Terracotta",
            object_type="Drinking Vessel",
            record_url="#",
            match_score=0.85,
        ),
        SearchResult(
            id="mock-3",
            title="Sumerian Ledger Tablet",
            era="2100 BCE",
            region="Mesopotamia",
            culture="Sumerian",
            material="Clay",
            object_type="Cuneiform Tablet",
            record_url="#",
            match_score=0.78,
        ),
    ]


# --- Search parameters from a report -----------------------------------------


def build_search_params(report: AIReport) -> SearchParams:
    """Derive catalogue query parameters from a normalised report."""

    return SearchParams(
        material=report.material_analysis or None,
        era=extract_era(report.cultural_context),
        region=extract_region(report.geographic_significance),
        culture=extract_culture(report.cultural_context),
        keywords=extract_keywords(report.classification),
    )


def extract_keywords(text: str) -> list[str]:
    terms = text.lower().split()
    significant = [term for term in terms if len(term) > 4 and term not in KEYWORD_STOPWORDS]
    return significant[:MAX_KEYWORDS]


def extract_era(era: Optional[str]) -> Optional[str]:
    if not era:
        return None
    match = _ERA_PATTERN.search(era)
    if match:
        return f"{match.group(1)} {match.group(2).upper()}"
    return era


def extract_region(text: Optional[str]) -> Optional[str]:
    return _first_vocabulary_match(text, REGIONS)


def extract_culture(text: Optional[str]) -> Optional[str]:
    return _first_vocabulary_match(text, CULTURES)


def _first_vocabulary_match(text: Optional[str], vocabulary: Sequence[str]) -> Optional[str]:
    if not text:
        return None
    lowered = text.lower()
    for term in vocabulary:
        if term.lower() in lowered:
            return term
    return None


def _extract_rows(payload: Any) -> list[Any] | None:
    if not isinstance(payload, dict):
        return None
    response = payload.get("response")
    if response is None:
        return []
    if not isinstance(response, dict):
        return None
    rows = response.get("rows") or []
    return rows if isinstance(rows, list) else None


def _first(values: Sequence[str]) -> Optional[str]:
    return values[0] if values else None


def _first_text(entries: Sequence[_TextEntry]) -> Optional[str]:
    return entries[0].content if entries and entries[0].content else None


__all__ = [
    "CULTURES",
    "CatalogRecordError",
    "DEFAULT_SMITHSONIAN_BASE_URL",
    "REGIONS",
    "SearchParams",
    "SearchResult",
    "build_query",
    "build_search_params",
    "extract_culture",
    "extract_era",
    "extract_keywords",
    "extract_region",
    "match_score",
    "mock_results",
    "parse_catalog_record",
    "search_similar_artifacts",
]
