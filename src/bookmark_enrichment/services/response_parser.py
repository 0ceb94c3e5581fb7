"""Parsing and normalization of generative model responses."""

import json
import re
from typing import Any

from ..exceptions import ResponseParseError
from ..models.enrichment import NO_SUMMARY, Category, EnrichmentResult

_LEADING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```$")


def extract_response_text(payload: dict[str, Any] | None) -> str:
    """Pull candidates[0].content.parts[0].text out of a generateContent body.

    Raises:
        ResponseParseError: If the text is missing or empty
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None

    if not isinstance(text, str) or not text:
        raise ResponseParseError("Invalid AI response: no candidate text")
    return text


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence (optionally tagged json) around the text."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_model_json(text: str) -> dict[str, str | None]:
    """Parse the JSON object embedded in model output.

    The object is taken from the first "{" to the last "}" of the cleaned
    text, so surrounding prose is ignored.

    Args:
        text: Raw model output text

    Returns:
        Dict with title, summary and category (None when absent or blank)

    Raises:
        ResponseParseError: If no JSON object can be parsed
    """
    cleaned = strip_code_fences(text)

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first < 0 or last <= first:
        raise ResponseParseError("No JSON object in AI response")

    try:
        data = json.loads(cleaned[first : last + 1])
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Failed to parse AI response: {e}") from e

    if not isinstance(data, dict):
        raise ResponseParseError("AI response JSON is not an object")

    return {key: _clean_field(data.get(key)) for key in ("title", "summary", "category")}


def _clean_field(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_category(category: str | None) -> Category:
    """Map a model-provided category onto the canonical enum."""
    return Category.from_label(category)


def build_result(text: str, original_title: str) -> EnrichmentResult:
    """Parse model text and apply field fallbacks.

    Args:
        text: Model output text
        original_title: Title supplied with the request

    Returns:
        Normalized EnrichmentResult
    """
    parsed = parse_model_json(text)
    return EnrichmentResult(
        title=parsed["title"] or original_title,
        summary=parsed["summary"] or NO_SUMMARY,
        category=normalize_category(parsed["category"]),
    )
