"""Trust-boundary validation for inbound enrichment requests."""

import re
from typing import Any

from ..exceptions import InvalidIdError, MissingFieldError
from ..models.enrichment import EnrichmentRequest

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

MISSING_FIELD_MESSAGE = "Invalid request body. 'id' and 'url' are required."
INVALID_ID_MESSAGE = "Invalid request body. 'id' must be a valid UUID."


def is_valid_uuid(value: str) -> bool:
    """Return True for a version 1-5 UUID in 8-4-4-4-12 hex form."""
    return bool(UUID_PATTERN.fullmatch(value))


def _coerce(value: Any) -> str:
    """Coerce a JSON scalar to a trimmed string; anything else counts as absent."""
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""


def validate_enrichment_payload(body: Any) -> EnrichmentRequest:
    """Validate a raw request body into an EnrichmentRequest.

    Args:
        body: Decoded JSON body (anything that is not a dict has no fields)

    Returns:
        EnrichmentRequest with trimmed id, url and title

    Raises:
        MissingFieldError: id or url empty after trimming
        InvalidIdError: id is not a version 1-5 UUID
    """
    fields = body if isinstance(body, dict) else {}

    bookmark_id = _coerce(fields.get("id"))
    url = _coerce(fields.get("url"))
    title = _coerce(fields.get("title"))

    if not bookmark_id or not url:
        raise MissingFieldError(MISSING_FIELD_MESSAGE)

    if not is_valid_uuid(bookmark_id):
        raise InvalidIdError(INVALID_ID_MESSAGE)

    return EnrichmentRequest(id=bookmark_id, url=url, title=title)
