"""Tests for the enrichment worker state machine."""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from bookmark_enrichment.config import Settings
from bookmark_enrichment.exceptions import ConfigurationError
from bookmark_enrichment.models.enrichment import (
    FALLBACK_SUMMARY,
    Category,
    EnrichmentRequest,
    EnrichmentStatus,
)
from bookmark_enrichment.services.enrichment_service import build_enrichment_service

MODEL_JSON = '{"title":"Example Site","summary":"A simple example domain.","category":"technology"}'


def _request(bookmark_id: str, title: str = "Example") -> EnrichmentRequest:
    return EnrichmentRequest(id=bookmark_id, url="https://example.com", title=title)


def test_second_candidate_after_not_found(make_service, store_recorder, gemini_text, bookmark_id) -> None:
    """First model is unknown (404), second returns usable JSON."""
    calls: list[str] = []

    def gemini(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            return httpx.Response(404, json={"error": {"status": "NOT_FOUND"}})
        return gemini_text(MODEL_JSON)

    service = make_service(gemini)
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.status == EnrichmentStatus.ENRICHED
    assert report.result.title == "Example Site"
    assert report.result.summary == "A simple example domain."
    assert report.result.category == Category.TECHNOLOGY
    assert report.model == "gemini-2.0-flash-lite"
    assert len(calls) == 2

    assert store_recorder.updates == [
        {
            "id": bookmark_id,
            "fields": {
                "title": "Example Site",
                "ai_summary": "A simple example domain.",
                "ai_category": "Technology",
            },
        }
    ]


def test_preferred_model_is_tried_first(make_service, gemini_text, bookmark_id) -> None:
    paths: list[str] = []

    def gemini(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return gemini_text(MODEL_JSON)

    service = make_service(gemini, preferred_model="gemini-2.5-pro")
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.model == "gemini-2.5-pro"
    assert paths == ["/v1beta/models/gemini-2.5-pro:generateContent"]


def test_all_candidates_server_error(make_service, store_recorder, bookmark_id) -> None:
    """A 500 is fatal: no further candidates, fallback fields are written."""
    calls: list[str] = []

    def gemini(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(500, text="internal")

    service = make_service(gemini)
    report = asyncio.run(service.enrich(_request(bookmark_id, title="Original")))

    assert len(calls) == 1
    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert report.result.title == "Original"
    assert report.result.summary == FALLBACK_SUMMARY
    assert report.result.category == Category.OTHER
    assert "500" in report.error
    assert store_recorder.updates == [
        {"id": bookmark_id, "fields": {"ai_summary": FALLBACK_SUMMARY, "ai_category": "Other"}}
    ]


def test_all_candidates_not_found(make_service, store_recorder, bookmark_id) -> None:
    service = make_service(lambda request: httpx.Response(404, text="no such model"))
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert len(report.attempts) == 3
    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert report.result.category == Category.OTHER
    assert "No supported Gemini model found" in report.error
    assert set(store_recorder.updates[0]["fields"]) == {"ai_summary", "ai_category"}


def test_response_without_braces_falls_back(make_service, store_recorder, gemini_text, bookmark_id) -> None:
    service = make_service(lambda request: gemini_text("Sorry, I cannot help with that."))
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert report.model == "gemini-2.0-flash"
    assert report.result.summary == FALLBACK_SUMMARY
    assert store_recorder.updates[0]["fields"] == {"ai_summary": FALLBACK_SUMMARY, "ai_category": "Other"}


def test_response_without_text_falls_back(make_service, store_recorder, bookmark_id) -> None:
    service = make_service(lambda request: httpx.Response(200, json={"candidates": []}))
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert "Invalid AI response" in report.error
    assert len(store_recorder.updates) == 1


def test_missing_fields_use_defaults(make_service, store_recorder, gemini_text, bookmark_id) -> None:
    service = make_service(lambda request: gemini_text('```json\n{"category": "Sports"}\n```'))
    report = asyncio.run(service.enrich(_request(bookmark_id, title="Keep Me")))

    assert report.status == EnrichmentStatus.ENRICHED
    assert report.result.title == "Keep Me"
    assert report.result.summary == "No summary available."
    assert report.result.category == Category.OTHER
    assert store_recorder.updates[0]["fields"]["ai_category"] == "Other"


def test_success_write_failure_falls_back(make_service, gemini_text, bookmark_id) -> None:
    """A failed success write is fatal; the fallback write is still attempted."""
    writes: list[bytes] = []

    def store(request: httpx.Request) -> httpx.Response:
        writes.append(request.content)
        return httpx.Response(500 if len(writes) == 1 else 204)

    service = make_service(lambda request: gemini_text(MODEL_JSON), store_handler=store)
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert len(writes) == 2
    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert report.result.title == "Example"
    assert report.result.category == Category.OTHER


def test_fallback_write_failure_is_swallowed(make_service, bookmark_id) -> None:
    def store(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("database unreachable", request=request)

    service = make_service(lambda request: httpx.Response(503), store_handler=store)
    report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.status == EnrichmentStatus.FALLBACK_NOT_PERSISTED
    assert not report.persisted
    assert report.result.summary == FALLBACK_SUMMARY
    assert report.result.category == Category.OTHER


def test_invalid_id_skips_everything(make_service, store_recorder) -> None:
    calls: list[httpx.Request] = []

    def gemini(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    service = make_service(gemini)
    report = asyncio.run(service.enrich(_request("not-a-uuid", title="Raw")))

    assert report.status == EnrichmentStatus.SKIPPED_INVALID_ID
    assert report.result.title == "Raw"
    assert report.result.summary == FALLBACK_SUMMARY
    assert report.result.category == Category.OTHER
    assert calls == []
    assert store_recorder.updates == []


def test_unexpected_error_still_falls_back(make_service, store_recorder, gemini_text, bookmark_id) -> None:
    service = make_service(lambda request: gemini_text(MODEL_JSON))

    with patch(
        "bookmark_enrichment.services.enrichment_service.build_result",
        side_effect=RuntimeError("boom"),
    ):
        report = asyncio.run(service.enrich(_request(bookmark_id)))

    assert report.status == EnrichmentStatus.FALLBACK_PERSISTED
    assert "boom" in report.error
    assert len(store_recorder.updates) == 1


def test_build_service_requires_api_key() -> None:
    config = Settings(gemini_api_key="", gemini_api_key_secret_arn="", supabase_url="https://x.supabase.co", supabase_key="k")

    with pytest.raises(ConfigurationError):
        build_enrichment_service(config)


def test_build_service_requires_supabase() -> None:
    config = Settings(gemini_api_key="key", supabase_url="", supabase_key="")

    with pytest.raises(ConfigurationError):
        build_enrichment_service(config)


def test_build_service_uses_configured_model() -> None:
    config = Settings(
        gemini_api_key="key",
        gemini_model="gemini-2.5-pro",
        supabase_url="https://x.supabase.co",
        supabase_key="k",
    )

    service = build_enrichment_service(config)

    assert service.candidates[0] == "gemini-2.5-pro"
    assert service.store.endpoint == "https://x.supabase.co/rest/v1/bookmarks"
