"""Immutable value types passed between pipeline stages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    """A catalog book as read from storage. Borrowed for one request."""

    id: str
    title: str
    author: str
    genre: str


@dataclass(frozen=True)
class Recommendation:
    """A single validated recommendation."""

    title: str
    author: str
    reason: str
    confidence: float
    catalog_id: str | None = None


RecommendationSet = tuple[Recommendation, ...]
