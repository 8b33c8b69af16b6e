"""Recommender port — abstract interface for the recommendation engine."""

from abc import ABC, abstractmethod

from shelfmate.domain.models import RecommendationSet


class RecommenderPort(ABC):
    """Abstraction for the query-driven book recommendation engine."""

    @abstractmethod
    async def recommend(
        self,
        query: str | None,
        timeout: float | None = None,
    ) -> RecommendationSet:
        """Return recommendations for a free-text query."""
        ...
