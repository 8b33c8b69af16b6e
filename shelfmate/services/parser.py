"""
Recovery of structured recommendations from untrusted model text.

Parsing is an ordered chain of fallible attempts. Each attempt returns a
tagged ``ParseAttempt``; the first successful one wins:

  1. ``strict``: the whole text is a JSON array.
  2. ``bracketed``: the span from the first ``[`` to the last ``]`` is a JSON array.

Elements of the recovered array are validated one by one. Invalid elements
are dropped without failing the set; an array with no usable elements
yields an empty set.
"""

import json
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from shelfmate.domain.errors import ParseError
from shelfmate.domain.models import Recommendation, RecommendationSet

logger = logging.getLogger(__name__)

RAW_TEXT_LOG_LIMIT = 500


class RecommendationPayload(BaseModel):
    """Schema for one recommendation object as emitted by the model."""

    model_config = ConfigDict(extra="ignore")

    book_id: str | None = Field(
        default=None, validation_alias=AliasChoices("bookId", "id", "book_id")
    )
    title: str
    author: str
    reason: str = ""
    confidence: float = 0.0

    @field_validator("book_id", mode="before")
    @classmethod
    def _normalize_book_id(cls, v: Any) -> str | None:
        if v is None or isinstance(v, (dict, list, bool)):
            return None
        v = str(v).strip()
        return v or None

    @field_validator("title", "author")
    @classmethod
    def _require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("reason", mode="before")
    @classmethod
    def _default_reason(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    def to_domain(self) -> Recommendation:
        return Recommendation(
            title=self.title,
            author=self.author,
            reason=self.reason,
            confidence=self.confidence,
            catalog_id=self.book_id,
        )


@dataclass(frozen=True)
class ParseAttempt:
    """Tagged outcome of one extraction attempt."""

    ok: bool
    items: list[Any] | None = None
    reason: str = ""

    @classmethod
    def success(cls, items: list[Any]) -> "ParseAttempt":
        return cls(ok=True, items=items)

    @classmethod
    def failure(cls, reason: str) -> "ParseAttempt":
        return cls(ok=False, reason=reason)


def parse_strict(text: str) -> ParseAttempt:
    """Parse the entire text as a JSON array."""
    try:
        data = json.loads(text)
    except ValueError as e:
        return ParseAttempt.failure(f"invalid JSON: {e}")
    if not isinstance(data, list):
        return ParseAttempt.failure(f"expected a JSON array, got {type(data).__name__}")
    return ParseAttempt.success(data)


def parse_bracketed(text: str) -> ParseAttempt:
    """Parse the outermost ``[...]`` span of the text as a JSON array."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        return ParseAttempt.failure("no bracketed array found")
    return parse_strict(text[start : end + 1])


ATTEMPTS: tuple[tuple[str, Callable[[str], ParseAttempt]], ...] = (
    ("strict", parse_strict),
    ("bracketed", parse_bracketed),
)


def validate_items(items: list[Any]) -> RecommendationSet:
    """Validate array elements, dropping the ones that cannot be used."""
    valid: list[Recommendation] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Dropping element %d: not an object", index)
            continue
        try:
            valid.append(RecommendationPayload.model_validate(item).to_domain())
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            logger.warning("Dropping element %d: invalid fields %s", index, fields)
    return tuple(valid)


class RecommendationParser:
    """Turns raw model text into a validated RecommendationSet."""

    def __init__(
        self,
        attempts: tuple[tuple[str, Callable[[str], ParseAttempt]], ...] = ATTEMPTS,
    ) -> None:
        self._attempts = attempts

    def parse(self, raw_text: str) -> RecommendationSet:
        """
        Extract recommendations from ``raw_text``.

        Raises:
            ParseError: no attempt recovered an array. The raw text is kept
                on the exception.
        """
        failures: list[str] = []
        for name, attempt in self._attempts:
            outcome = attempt(raw_text)
            if not outcome.ok:
                failures.append(f"{name}: {outcome.reason}")
                continue

            recommendations = validate_items(outcome.items or [])
            logger.info(
                "Parsed %d/%d recommendations via %s attempt",
                len(recommendations),
                len(outcome.items or []),
                name,
            )
            return recommendations

        logger.warning(
            "Unparseable model response (%s): %.*s",
            "; ".join(failures),
            RAW_TEXT_LOG_LIMIT,
            raw_text,
        )
        raise ParseError("Could not extract a JSON array from model response", raw_text)
