"""Tests for the museum catalogue search client."""

from __future__ import annotations

import httpx
import pytest

from apps.artifacts.services.catalog import (
    CatalogRecordError,
    SearchParams,
    build_query,
    build_search_params,
    extract_culture,
    extract_era,
    extract_keywords,
    extract_region,
    match_score,
    mock_results,
    parse_catalog_record,
    search_similar_artifacts,
)
from apps.artifacts.services.openrouter import normalise_report

SAMPLE_ROW = {
    "id": "edanmdm-nmnhanthropology_8000",
    "title": "Fallback title",
    "content": {
        "descriptiveNonRepeating": {
            "title": {"label": "Title", "content": "Funerary Mask"},
            "record_link": "https://collections.si.edu/record/8000",
            "online_media": {
                "media": [
                    {
                        "content": "https://ids.si.edu/full.jpg",
                        "thumbnail": "https://ids.si.edu/thumb.jpg",
                    }
                ]
            },
        },
        "indexedStructured": {
            "date": ["1300s BCE"],
            "place": ["Egypt"],
            "culture": ["Egyptian"],
            "object_type": ["Masks"],
            "material": ["Gold"],
        },
        "freetext": {"objectType": [{"label": "Type", "content": "Mask"}]},
    },
}


def test_extract_keywords_filters_short_words_and_stopwords():
    assert extract_keywords("Ceremonial Gold Funerary Mask") == ["ceremonial", "funerary"]
    assert extract_keywords("which would could these their about") == []
    assert extract_keywords("alpha bravo charlie delta foxtrot hotel indigo juliet") == [
        "alpha",
        "bravo",
        "charlie",
        "delta",
        "foxtrot",
    ]


def test_extract_era_normalises_suffix_or_passes_through():
    assert extract_era("circa 1323 BCE, Eighteenth Dynasty") == "1323 BCE"
    assert extract_era("around 79 ad") == "79 AD"
    assert extract_era("Late Bronze Age") == "Late Bronze Age"
    assert extract_era(None) is None


def test_region_and_culture_use_first_vocabulary_match():
    assert extract_region("Trade between rome and egypt") == "Egypt"
    assert extract_region("Somewhere in Anatolia") is None
    assert extract_culture("Greek colonists under Roman rule") == "Greek"
    assert extract_culture("") is None


def test_build_search_params_from_report():
    report = normalise_report(
        {
            "classification": "Ceremonial Gold Funerary Mask",
            "materialAnalysis": "Gold alloy",
            "culturalContext": "Egyptian New Kingdom, circa 1323 BCE",
            "geographicSignificance": "Valley of the Kings, Egypt",
        }
    )

    params = build_search_params(report)

    assert params.keywords == ["ceremonial", "funerary"]
    assert params.material == "Gold alloy"
    assert params.era == "1323 BCE"
    assert params.region == "Egypt"
    assert params.culture == "Egyptian"


def test_build_query_joins_present_terms():
    params = SearchParams(
        keywords=["funerary", "mask"],
        material="gold",
        culture="Egyptian",
        object_type="mask",
        region="Egypt",
    )

    assert build_query(params) == (
        "funerary mask AND material:gold AND culture:Egyptian AND object_type:mask AND place:Egypt"
    )
    assert build_query(SearchParams()) == "archaeology artifact"


def test_match_score_is_rank_based():
    total = 4
    scores = [match_score(index, total) for index in range(total)]

    assert scores[0] == 1.0
    assert scores[-1] == 1 - ((total - 1) / total) * 0.5
    assert scores == sorted(scores, reverse=True)
    assert all(score > 0.5 for score in scores)


def test_parse_catalog_record_reads_nested_fields():
    result = parse_catalog_record(SAMPLE_ROW, 0, 1)

    assert result.id == "edanmdm-nmnhanthropology_8000"
    assert result.title == "Funerary Mask"
    assert result.image_url == "https://ids.si.edu/full.jpg"
    assert result.thumbnail_url == "https://ids.si.edu/thumb.jpg"
    assert result.era == "1300s BCE"
    assert result.material == "Gold"
    assert result.object_type == "Masks"
    assert result.record_url == "https://collections.si.edu/record/8000"
    assert result.match_score == 1.0


def test_parse_catalog_record_tolerates_missing_content():
    result = parse_catalog_record({"id": "abc", "content": "garbage"}, 1, 2)

    assert result.title == "Untitled Artifact"
    assert result.image_url is None
    assert result.record_url == "https://collections.si.edu/search/detail/abc"
    assert result.match_score == 0.75


@pytest.mark.parametrize("row", ["not-a-dict", {"title": "No id"}, {"id": ""}])
def test_parse_catalog_record_rejects_invalid_rows(row):
    with pytest.raises(CatalogRecordError):
        parse_catalog_record(row, 0, 1)


def test_search_without_api_key_returns_mock_results():
    results = search_similar_artifacts(SearchParams(), api_key=None)

    assert [result.id for result in results] == ["mock-1", "mock-2", "mock-3"]


def test_search_queries_catalogue_and_skips_bad_rows():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        return httpx.Response(
            200,
            json={"response": {"rows": [SAMPLE_ROW, {"title": "missing id"}, {"id": "second"}]}},
        )

    results = search_similar_artifacts(
        SearchParams(keywords=["mask"], material="gold"),
        api_key="si-key",
        base_url="https://api.example.org/v1.0/",
        transport=httpx.MockTransport(handler),
    )

    url = captured["url"]
    assert url.path == "/v1.0/search"
    assert url.params["api_key"] == "si-key"
    assert url.params["q"] == "mask AND material:gold"
    assert url.params["rows"] == "20"
    assert url.params["start"] == "0"

    assert [result.id for result in results] == ["edanmdm-nmnhanthropology_8000", "second"]
    assert results[1].match_score == 1 - (2 / 3) * 0.5


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"error": "down"}),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json={"response": {"rows": "nope"}}),
    ],
)
def test_search_failures_fall_back_to_mock_results(response):
    results = search_similar_artifacts(
        SearchParams(keywords=["mask"]),
        api_key="si-key",
        transport=httpx.MockTransport(lambda request: response),
    )

    assert [result.id for result in results] == [result.id for result in mock_results()]


def test_search_network_error_falls_back_to_mock_results():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    results = search_similar_artifacts(
        SearchParams(),
        api_key="si-key",
        transport=httpx.MockTransport(handler),
    )

    assert len(results) == 3
