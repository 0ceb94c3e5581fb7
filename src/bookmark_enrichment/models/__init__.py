"""Pydantic models for request/response schemas."""

from .bookmark import PendingBookmark
from .enrichment import (
    FALLBACK_SUMMARY,
    NO_SUMMARY,
    AttemptOutcome,
    Category,
    EnrichmentReport,
    EnrichmentRequest,
    EnrichmentResult,
    EnrichmentStatus,
    ModelAttempt,
)

__all__ = [
    "FALLBACK_SUMMARY",
    "NO_SUMMARY",
    "AttemptOutcome",
    "Category",
    "EnrichmentReport",
    "EnrichmentRequest",
    "EnrichmentResult",
    "EnrichmentStatus",
    "ModelAttempt",
    "PendingBookmark",
]
