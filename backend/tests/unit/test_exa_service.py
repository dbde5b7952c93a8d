"""Unit tests for the Exa search proxy service."""

import json

import httpx
import pytest

from backend.mindit.services.config import AppConfig
from backend.mindit.services.exa import (
    BadRequest,
    ConfigurationError,
    ExaService,
    UpstreamFailure,
    clamp_num_results,
    make_snippet,
    normalize_result,
    normalize_results,
)


def _service(config: AppConfig, handler) -> ExaService:
    return ExaService(config, transport=httpx.MockTransport(handler))


def test_make_snippet_truncates_and_marks() -> None:
    snippet = make_snippet("a" * 500)

    assert snippet == "a" * 200 + "..."
    assert make_snippet("short") == "short..."


@pytest.mark.parametrize("text", [None, ""])
def test_make_snippet_placeholder(text) -> None:
    assert make_snippet(text) == "No preview available"


def test_normalize_result_maps_fields() -> None:
    result = normalize_result(
        {
            "title": "Ownership",
            "url": "https://example.com/ownership",
            "text": "Rust uses ownership.",
            "publishedDate": "2024-05-01",
            "source": "example.com",
            "score": 0.9,
        }
    )

    assert result.title == "Ownership"
    assert result.link == "https://example.com/ownership"
    assert result.snippet == "Rust uses ownership...."
    assert result.published_date == "2024-05-01"
    assert result.source == "example.com"


def test_normalize_results_tolerates_mixed_field_types() -> None:
    results = normalize_results(
        {
            "results": [
                {"title": "ok", "url": "https://a.example", "text": "body"},
                {"title": 42, "url": "https://b.example", "publishedDate": 20240101},
                {"title": {"nested": True}, "source": ["x"], "text": 7},
                "not-a-record",
            ]
        }
    )

    assert len(results) == 4
    assert results[1].title == "42"
    assert results[1].published_date == "20240101"
    assert results[2].title is None
    assert results[2].source is None
    assert results[2].snippet == "7..."
    assert results[3].snippet == "No preview available"


def test_normalize_results_without_collection_is_empty() -> None:
    assert normalize_results({}) == []
    assert normalize_results({"results": None}) == []
    assert normalize_results({"results": "oops"}) == []


@pytest.mark.parametrize(
    "value,expected",
    [(None, 5), (3, 3), (0, 1), (-4, 1), (500, 100), (7.0, 7)],
)
def test_clamp_num_results(value, expected: int) -> None:
    assert clamp_num_results(value) == expected


@pytest.mark.parametrize("value", ["3", True, 2.5, [1]])
def test_clamp_num_results_rejects_non_integers(value) -> None:
    with pytest.raises(BadRequest):
        clamp_num_results(value)


@pytest.mark.asyncio
async def test_search_sends_expected_request(backend_config) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["api_key"] = request.headers["x-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"results": []})

    await _service(backend_config, handler).search("rust memory safety", 3)

    assert seen["url"] == "https://api.exa.ai/search"
    assert seen["api_key"] == "exa-test-key"
    assert seen["body"] == {
        "query": "rust memory safety",
        "numResults": 3,
        "useAutoprompt": True,
        "type": "keyword",
    }


@pytest.mark.asyncio
async def test_search_normalizes_results_in_order(backend_config) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "results": [
                    {"title": "First", "url": "https://a.example", "text": "x" * 1000},
                    {"title": "Second", "url": "https://b.example"},
                ]
            },
        )

    results = await _service(backend_config, handler).search("rust memory safety", 3)

    assert [r.title for r in results] == ["First", "Second"]
    assert len(results[0].snippet) == 203
    assert results[1].snippet == "No preview available"


@pytest.mark.asyncio
async def test_search_propagates_upstream_status(backend_config) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream overloaded")

    with pytest.raises(UpstreamFailure) as excinfo:
        await _service(backend_config, handler).search("rust")

    assert excinfo.value.status_code == 503
    assert excinfo.value.to_payload() == {
        "error": "Failed to fetch search results",
        "details": "upstream overloaded",
    }


@pytest.mark.asyncio
async def test_search_requires_api_key_before_anything_else() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    service = _service(AppConfig(), handler)

    for query in ("", "rust"):
        with pytest.raises(ConfigurationError) as excinfo:
            await service.search(query)
        assert excinfo.value.status_code == 500
    assert calls == []


@pytest.mark.asyncio
async def test_empty_query_is_rejected_without_calling_exa(backend_config) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(BadRequest) as excinfo:
        await _service(backend_config, handler).search("")

    assert excinfo.value.status_code == 400
    assert calls == []
