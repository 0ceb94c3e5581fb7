"""Business logic services."""

from .bookmark_store import BookmarkStore
from .enrichment_service import EnrichmentService, build_enrichment_service
from .gemini_client import GeminiClient, get_model_candidates
from .validator import is_valid_uuid, validate_enrichment_payload

__all__ = [
    "BookmarkStore",
    "EnrichmentService",
    "GeminiClient",
    "build_enrichment_service",
    "get_model_candidates",
    "is_valid_uuid",
    "validate_enrichment_payload",
]
