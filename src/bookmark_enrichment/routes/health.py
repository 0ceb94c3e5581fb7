"""Health check endpoint."""

from fastapi import APIRouter

from ..config import settings
from ..services.gemini_client import get_model_candidates

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Return service health status and the first model that will be tried."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "environment": settings.environment,
        "model": get_model_candidates(settings.gemini_model)[0],
    }
