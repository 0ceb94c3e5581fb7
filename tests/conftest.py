"""Shared pytest fixtures for the enrichment service tests."""

import json
from collections.abc import Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from bookmark_enrichment.main import app
from bookmark_enrichment.routes import enrich
from bookmark_enrichment.services.bookmark_store import BookmarkStore
from bookmark_enrichment.services.enrichment_service import EnrichmentService
from bookmark_enrichment.services.gemini_client import GeminiClient

VALID_ID = "3f2b8c1e-5d4a-4b6c-9e7f-1a2b3c4d5e6f"
SUPABASE_URL = "https://project.supabase.co"


@pytest.fixture
def client() -> Iterator[TestClient]:
    """TestClient for the FastAPI app with a fresh service cache."""
    enrich._get_enrichment_service.cache_clear()
    yield TestClient(app)
    enrich._get_enrichment_service.cache_clear()


def gemini_text_response(text: str, status_code: int = 200) -> httpx.Response:
    """A generateContent response carrying the given candidate text."""
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


class StoreRecorder:
    """Records PATCH requests sent to the Supabase REST endpoint."""

    def __init__(self, status_code: int = 204):
        self.status_code = status_code
        self.updates: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "PATCH":
            self.updates.append(
                {
                    "id": request.url.params["id"].removeprefix("eq."),
                    "fields": json.loads(request.content),
                }
            )
        return httpx.Response(self.status_code)


@pytest.fixture
def store_recorder() -> StoreRecorder:
    return StoreRecorder()


@pytest.fixture
def make_service(store_recorder: StoreRecorder) -> Callable[..., EnrichmentService]:
    """Build an EnrichmentService whose collaborators are httpx MockTransports."""

    def _make(
        gemini_handler: Callable,
        store_handler: Callable | None = None,
        preferred_model: str | None = None,
        timeout: float = 25.0,
    ) -> EnrichmentService:
        gemini = GeminiClient(
            api_key="test-key",
            timeout=timeout,
            transport=httpx.MockTransport(gemini_handler),
        )
        store = BookmarkStore(
            SUPABASE_URL,
            "service-key",
            transport=httpx.MockTransport(store_handler or store_recorder),
        )
        return EnrichmentService(gemini, store, preferred_model=preferred_model)

    return _make


@pytest.fixture
def bookmark_id() -> str:
    return VALID_ID


@pytest.fixture
def gemini_text() -> Callable[..., httpx.Response]:
    """Factory for generateContent responses (see gemini_text_response)."""
    return gemini_text_response
