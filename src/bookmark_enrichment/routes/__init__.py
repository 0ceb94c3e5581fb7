"""API route modules."""

from . import enrich, health

__all__ = ["health", "enrich"]
