"""Enrichment request/result models."""

from enum import Enum

from pydantic import BaseModel, Field

FALLBACK_SUMMARY = "Could not analyze this link. Try again later."
NO_SUMMARY = "No summary available."


class Category(str, Enum):
    """Fixed bookmark categories produced by enrichment."""

    TECHNOLOGY = "Technology"
    NEWS = "News"
    DESIGN = "Design"
    EDUCATION = "Education"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    PRODUCTIVITY = "Productivity"
    HEALTH = "Health"
    SOCIAL = "Social"
    BUSINESS = "Business"
    MUSIC = "Music"
    TOOL = "Tool"
    OTHER = "Other"  # Catch-all, never offered to the model

    @classmethod
    def from_label(cls, label: str | None) -> "Category":
        """Match a label case-insensitively, falling back to OTHER."""
        if not label:
            return cls.OTHER
        wanted = label.strip().lower()
        for category in cls:
            if category is not cls.OTHER and category.value.lower() == wanted:
                return category
        return cls.OTHER


# Categories the model may choose from (OTHER is the normalizer's catch-all)
PROMPT_CATEGORIES = [c.value for c in Category if c is not Category.OTHER]


class EnrichmentStatus(str, Enum):
    """Terminal state of a single enrichment run."""

    ENRICHED = "enriched"
    FALLBACK_PERSISTED = "fallback_persisted"
    FALLBACK_NOT_PERSISTED = "fallback_not_persisted"
    SKIPPED_INVALID_ID = "skipped_invalid_id"


class AttemptOutcome(str, Enum):
    """Outcome of calling one candidate model."""

    SUCCESS = "success"
    RETRYABLE = "retryable"  # Try the next candidate
    FATAL = "fatal"  # Abort the candidate loop


class EnrichmentRequest(BaseModel):
    """Validated enrichment request."""

    id: str = Field(..., description="Bookmark id (UUID v1-5)")
    url: str = Field(..., description="Bookmark URL, trimmed")
    title: str = Field("", description="User-provided title, may be empty")


class EnrichmentResult(BaseModel):
    """AI-generated (or fallback) bookmark enrichment."""

    title: str
    summary: str
    category: Category

    @classmethod
    def fallback(cls, title: str) -> "EnrichmentResult":
        """Fallback result that keeps the caller's title."""
        return cls(title=title, summary=FALLBACK_SUMMARY, category=Category.OTHER)


class ModelAttempt(BaseModel):
    """Record of one candidate model call."""

    model: str
    outcome: AttemptOutcome
    status_code: int | None = None
    error: str | None = None
    payload: dict | None = Field(None, exclude=True)


class EnrichmentReport(BaseModel):
    """Full outcome of an enrichment run, including how it terminated."""

    request_id: str
    result: EnrichmentResult
    status: EnrichmentStatus
    model: str | None = Field(None, description="Model that produced the response")
    error: str | None = Field(None, description="Fatal error that forced the fallback")
    attempts: list[ModelAttempt] = Field(default_factory=list)

    @property
    def persisted(self) -> bool:
        """Whether the bookmark record reached a terminal state in storage."""
        return self.status in (EnrichmentStatus.ENRICHED, EnrichmentStatus.FALLBACK_PERSISTED)
