"""Gemini generateContent client with ordered model fallback."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

import httpx

from ..models.enrichment import PROMPT_CATEGORIES, AttemptOutcome, ModelAttempt

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODELS = ["gemini-2.0-flash", "gemini-2.0-flash-lite", "gemini-1.5-flash"]
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = 25.0

# Longest error body kept on an attempt record
_ERROR_SNIPPET = 500


def get_model_candidates(configured: str | None = None) -> list[str]:
    """Build the ordered candidate list: configured model first, then defaults.

    Args:
        configured: Preferred model override (ignored when blank)

    Returns:
        Non-empty list of model identifiers without duplicates
    """
    preferred = (configured or "").strip()
    if not preferred:
        return list(DEFAULT_GEMINI_MODELS)
    return [preferred] + [model for model in DEFAULT_GEMINI_MODELS if model != preferred]


def classify_status(status_code: int) -> AttemptOutcome:
    """Map an HTTP status onto the candidate-loop outcome."""
    if 200 <= status_code < 300:
        return AttemptOutcome.SUCCESS
    if status_code == 404:
        return AttemptOutcome.RETRYABLE
    return AttemptOutcome.FATAL


def build_enrichment_prompt(url: str, title: str) -> str:
    """Instructional prompt asking for title, summary and category as JSON."""
    categories = ", ".join(PROMPT_CATEGORIES)
    return f"""You are a helpful assistant that categorizes and summarizes web bookmarks.
URL: {url}
User-provided Title: {title}

Provide a JSON response with exactly three fields:
1. "title": A catchy, descriptive title for this bookmark (max 6 words). If the user-provided title is already good, enhance it slightly.
2. "summary": A concise, insightful 1-sentence summary of what this website/page is about and why it's useful.
3. "category": A single-word category from this list: {categories}.

Response format: {{"title": "...", "summary": "...", "category": "..."}}"""


async def try_candidates(
    candidates: Sequence[str],
    call: Callable[[str], Awaitable[ModelAttempt]],
) -> tuple[ModelAttempt | None, list[ModelAttempt]]:
    """Call candidates in order until one succeeds or one fails fatally.

    Args:
        candidates: Ordered model identifiers
        call: Coroutine function performing one attempt for a model

    Returns:
        (successful attempt or None, every attempt made in order)
    """
    attempts: list[ModelAttempt] = []
    for model in candidates:
        attempt = await call(model)
        attempts.append(attempt)

        if attempt.outcome == AttemptOutcome.SUCCESS:
            return attempt, attempts
        if attempt.outcome == AttemptOutcome.FATAL:
            return None, attempts
    return None, attempts


class GeminiClient:
    """Minimal async client for the Gemini REST generateContent endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter
            base_url: API root including version segment
            timeout: Total deadline for a single model call, in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(self, model: str, prompt: str, json_output: bool = True) -> ModelAttempt:
        """Issue one generateContent call and classify its outcome.

        Timeouts are retryable; other transport errors and non-JSON success
        bodies are fatal.
        """
        body: dict = {"contents": [{"parts": [{"text": prompt}]}]}
        if json_output:
            body["generationConfig"] = {"response_mime_type": "application/json"}

        # One client per call so the connection is released when the call settles
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await asyncio.wait_for(
                    client.post(
                        f"{self.base_url}/models/{model}:generateContent",
                        params={"key": self._api_key},
                        json=body,
                    ),
                    timeout=self.timeout,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                logger.warning(f"Gemini call timed out after {self.timeout}s on model {model}")
                return ModelAttempt(
                    model=model,
                    outcome=AttemptOutcome.RETRYABLE,
                    error=f"Timed out after {self.timeout}s",
                )
            except httpx.HTTPError as e:
                logger.error(f"Gemini transport error on model {model}: {e}")
                return ModelAttempt(model=model, outcome=AttemptOutcome.FATAL, error=str(e))

        outcome = classify_status(response.status_code)
        if outcome != AttemptOutcome.SUCCESS:
            error_text = response.text[:_ERROR_SNIPPET]
            logger.error(f"Gemini API Error ({response.status_code}) on model {model}: {error_text}")
            return ModelAttempt(
                model=model,
                outcome=outcome,
                status_code=response.status_code,
                error=error_text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Gemini returned a non-JSON body on model {model}: {e}")
            return ModelAttempt(
                model=model,
                outcome=AttemptOutcome.FATAL,
                status_code=response.status_code,
                error="Response body is not JSON",
            )

        return ModelAttempt(
            model=model,
            outcome=AttemptOutcome.SUCCESS,
            status_code=response.status_code,
            payload=payload if isinstance(payload, dict) else None,
        )

    async def generate_with_fallback(
        self,
        candidates: Sequence[str],
        prompt: str,
        json_output: bool = True,
    ) -> tuple[ModelAttempt | None, list[ModelAttempt]]:
        """Try each candidate model in order (see try_candidates)."""

        async def _call(model: str) -> ModelAttempt:
            return await self.generate(model, prompt, json_output=json_output)

        return await try_candidates(candidates, _call)
