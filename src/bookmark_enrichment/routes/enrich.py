"""AI enrichment endpoint for newly saved bookmarks."""

import logging
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Request

from ..config import settings
from ..exceptions import ConfigurationError, EnrichmentRequestError
from ..models.enrichment import EnrichmentResult
from ..services.enrichment_service import EnrichmentService, build_enrichment_service
from ..services.validator import validate_enrichment_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["enrichment"])


@lru_cache(maxsize=1)
def _get_enrichment_service() -> EnrichmentService:
    """Get or create EnrichmentService singleton."""
    return build_enrichment_service(settings)


@router.post("/enrich", response_model=EnrichmentResult)
async def enrich_bookmark(request: Request) -> EnrichmentResult:
    """Enrich a bookmark with an AI title, summary and category.

    Body: `{"id": "<uuid>", "url": "...", "title": "..."}`

    The bookmark record is always left in a terminal state: either the
    AI fields are written, or `ai_summary`/`ai_category` get fallback
    values. Invalid input is rejected with 400 before any external call.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    try:
        enrichment_request = validate_enrichment_payload(body)
    except EnrichmentRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        service = _get_enrichment_service()
        report = await service.enrich(enrichment_request)
    except ConfigurationError:
        logger.exception("Enrichment service is not configured")
        raise HTTPException(status_code=500, detail="Internal Server Error")
    except Exception:
        logger.exception("AI Enrichment API Error")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    logger.info(f"Enrichment for {report.request_id} finished with status {report.status.value}")
    return report.result
