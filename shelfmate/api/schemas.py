"""Pydantic request/response schemas for the HTTP boundary."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shelfmate.domain.models import Recommendation


class RecommendRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _coerce_query(cls, v: Any) -> str | None:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        if not isinstance(v, str):
            return None
        return v


class RecommendationItem(BaseModel):
    """A recommendation as rendered to callers. ``bookId`` only for catalog books."""

    model_config = ConfigDict(populate_by_name=True)

    book_id: str | None = Field(default=None, alias="bookId")
    title: str
    author: str
    reason: str
    confidence: float

    @classmethod
    def from_domain(cls, rec: Recommendation) -> "RecommendationItem":
        return cls(
            book_id=rec.catalog_id,
            title=rec.title,
            author=rec.author,
            reason=rec.reason,
            confidence=rec.confidence,
        )


class RecommendationsResponse(BaseModel):
    recommendations: list[RecommendationItem]


class ErrorResponse(BaseModel):
    error: str
    details: str
