"""Bookmark record fields touched by the enrichment pipeline."""

from pydantic import BaseModel


class PendingBookmark(BaseModel):
    """Bookmark still waiting for ai_summary/ai_category."""

    id: str
    url: str
    title: str | None = None
