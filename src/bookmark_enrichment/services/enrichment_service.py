"""Bookmark enrichment worker: model call, normalization and persistence."""

import logging

from ..config import Settings
from ..exceptions import ConfigurationError, EnrichmentError, ModelCallError
from ..models.enrichment import (
    FALLBACK_SUMMARY,
    AttemptOutcome,
    Category,
    EnrichmentReport,
    EnrichmentRequest,
    EnrichmentResult,
    EnrichmentStatus,
    ModelAttempt,
)
from .bookmark_store import BookmarkStore
from .gemini_client import GeminiClient, build_enrichment_prompt, get_model_candidates
from .response_parser import build_result, extract_response_text
from .secrets import resolve_gemini_api_key
from .validator import is_valid_uuid

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Turns a bookmark (id, url, title) into a terminal enrichment state."""

    def __init__(
        self,
        gemini: GeminiClient,
        store: BookmarkStore,
        preferred_model: str | None = None,
    ):
        """Initialize enrichment service.

        Args:
            gemini: Client for the generative text endpoint
            store: Bookmark persistence store
            preferred_model: Optional model tried before the defaults
        """
        self.gemini = gemini
        self.store = store
        self.candidates = get_model_candidates(preferred_model)

    async def enrich(self, request: EnrichmentRequest) -> EnrichmentReport:
        """Enrich a bookmark and persist the outcome.

        Never raises. Every failure after the id check resolves to the
        fallback result with a best-effort write of the fallback fields.

        Args:
            request: Bookmark id, URL and user title

        Returns:
            EnrichmentReport describing the result and how it was reached
        """
        title = request.title

        # The worker can be called without going through the validator
        if not is_valid_uuid(request.id):
            logger.error(f"Skipping enrichment: invalid bookmark id {request.id!r}")
            return EnrichmentReport(
                request_id=request.id,
                result=EnrichmentResult.fallback(title),
                status=EnrichmentStatus.SKIPPED_INVALID_ID,
                error="Invalid bookmark id",
            )

        logger.info(f"Starting enrichment for bookmark {request.id} ({request.url})")

        attempts: list[ModelAttempt] = []
        model: str | None = None
        try:
            prompt = build_enrichment_prompt(request.url, title)
            selected, attempts = await self.gemini.generate_with_fallback(self.candidates, prompt)
            if selected is None:
                raise ModelCallError(_describe_model_failure(attempts))

            model = selected.model
            logger.info(f"Using Gemini model: {model}")

            text = extract_response_text(selected.payload)
            result = build_result(text, title)

            await self.store.update_bookmark(
                request.id,
                {
                    "title": result.title,
                    "ai_summary": result.summary,
                    "ai_category": result.category.value,
                },
            )
        except EnrichmentError as e:
            logger.error(f"Enrichment failed for {request.id}: {e}")
            return await self._fallback(request, attempts, model, str(e))
        except Exception as e:
            logger.exception(f"Unexpected enrichment failure for {request.id}")
            return await self._fallback(request, attempts, model, f"Unexpected error: {e}")

        logger.info(
            f"Enrichment succeeded for {request.id}: "
            f'title="{result.title}", category="{result.category.value}"'
        )
        return EnrichmentReport(
            request_id=request.id,
            result=result,
            status=EnrichmentStatus.ENRICHED,
            model=model,
            attempts=attempts,
        )

    async def _fallback(
        self,
        request: EnrichmentRequest,
        attempts: list[ModelAttempt],
        model: str | None,
        error: str,
    ) -> EnrichmentReport:
        """Write fallback ai_summary/ai_category so the bookmark leaves processing."""
        status = EnrichmentStatus.FALLBACK_PERSISTED
        try:
            await self.store.update_bookmark(
                request.id,
                {"ai_summary": FALLBACK_SUMMARY, "ai_category": Category.OTHER.value},
            )
        except Exception:
            # Best effort: the fallback result is returned either way
            logger.exception(f"Fallback update failed for {request.id}")
            status = EnrichmentStatus.FALLBACK_NOT_PERSISTED

        return EnrichmentReport(
            request_id=request.id,
            result=EnrichmentResult.fallback(request.title),
            status=status,
            model=model,
            error=error,
            attempts=attempts,
        )


def _describe_model_failure(attempts: list[ModelAttempt]) -> str:
    """Error message for a candidate loop that produced no response."""
    if attempts and attempts[-1].outcome == AttemptOutcome.FATAL:
        last = attempts[-1]
        if last.status_code is not None:
            return f"Gemini API returned {last.status_code} on model {last.model}"
        return f"Gemini call failed on model {last.model}: {last.error}"

    last_error = attempts[-1].error if attempts else None
    return f"No supported Gemini model found. Last API error: {last_error or 'unknown'}"


def build_enrichment_service(config: Settings) -> EnrichmentService:
    """Build an EnrichmentService from settings.

    Raises:
        ConfigurationError: If the Gemini key or Supabase settings are missing
    """
    api_key = resolve_gemini_api_key(config)

    if not config.supabase_url or not config.supabase_key:
        raise ConfigurationError("Supabase URL and key must be configured")

    gemini = GeminiClient(
        api_key=api_key,
        base_url=config.gemini_base_url,
        timeout=config.gemini_timeout_seconds,
    )
    store = BookmarkStore(
        supabase_url=config.supabase_url,
        api_key=config.supabase_key,
        table=config.bookmarks_table,
    )
    return EnrichmentService(gemini, store, preferred_model=config.gemini_model)
