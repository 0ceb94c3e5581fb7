"""Exception types raised across the enrichment pipeline."""


class EnrichmentError(Exception):
    """Base class for enrichment pipeline errors."""


class EnrichmentRequestError(EnrichmentError, ValueError):
    """Inbound request rejected at the trust boundary (client error)."""


class MissingFieldError(EnrichmentRequestError):
    """A required field (id or url) is empty after trimming."""


class InvalidIdError(EnrichmentRequestError):
    """The bookmark id is not a version 1-5 UUID."""


class ConfigurationError(EnrichmentError):
    """Operator misconfiguration, e.g. missing API credential."""


class ModelCallError(EnrichmentError):
    """No candidate model produced a usable response."""


class ResponseParseError(EnrichmentError):
    """Model response had no text or no parseable JSON object."""


class BookmarkStoreError(EnrichmentError):
    """Persistence store rejected or failed an operation."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
