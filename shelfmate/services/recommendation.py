"""Query-driven recommendation service: sample → prompt → model → parse."""

import asyncio
import dataclasses
import logging

from shelfmate.domain.errors import InvocationError
from shelfmate.domain.models import CatalogEntry, RecommendationSet
from shelfmate.ports.llm import LLMPort
from shelfmate.ports.recommender import RecommenderPort
from shelfmate.prompts.templates import estimate_tokens, render_recommendation_prompt
from shelfmate.services.catalog_sampler import CatalogSampler
from shelfmate.services.parser import RAW_TEXT_LOG_LIMIT, RecommendationParser

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "recommend me a book"


def normalize_query(query: str | None, default: str = DEFAULT_QUERY) -> str:
    """Strip the query and fall back to the default when blank."""
    if query is None:
        return default
    query = query.strip()
    return query or default


def strip_unknown_catalog_ids(
    recommendations: RecommendationSet,
    entries: list[CatalogEntry],
) -> RecommendationSet:
    """Drop catalog ids that were not part of the sample shown to the model."""
    known = {e.id for e in entries}
    cleaned = []
    for rec in recommendations:
        if rec.catalog_id is not None and rec.catalog_id not in known:
            logger.warning(
                "Model returned unknown catalog id %r for %r; treating as external",
                rec.catalog_id,
                rec.title,
            )
            rec = dataclasses.replace(rec, catalog_id=None)
        cleaned.append(rec)
    return tuple(cleaned)


class RecommendationService(RecommenderPort):
    """
    Orchestrates one recommendation request.

    Holds only immutable collaborators and configuration, so a single
    instance is shared by all concurrent requests.
    """

    def __init__(
        self,
        sampler: CatalogSampler,
        llm: LLMPort,
        parser: RecommendationParser | None = None,
        *,
        sample_size: int = 20,
        default_query: str = DEFAULT_QUERY,
        timeout: float | None = 60.0,
        max_retries: int = 1,
        retry_delay: float = 1.0,
        strip_unknown_ids: bool = True,
    ) -> None:
        self._sampler = sampler
        self._llm = llm
        self._parser = parser or RecommendationParser()
        self._sample_size = sample_size
        self._default_query = default_query
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._strip_unknown_ids = strip_unknown_ids

    async def recommend(
        self,
        query: str | None,
        timeout: float | None = None,
    ) -> RecommendationSet:
        """
        Produce recommendations for a free-text query.

        Args:
            query: User query; blank or missing uses the default query.
            timeout: Seconds allowed per model call. Falls back to the
                configured timeout.

        Raises:
            InvocationError: the model call failed or timed out.
            ParseError: no recommendation array could be recovered from the reply.
        """
        query = normalize_query(query, self._default_query)
        entries = await self._sampler.sample(self._sample_size)

        prompt = render_recommendation_prompt(query, entries)
        logger.info(
            "Recommendation prompt built: %d catalog entries, ~%d tokens",
            len(entries),
            estimate_tokens(prompt),
        )

        if timeout is None:
            timeout = self._timeout
        raw_text = await self._invoke_with_retry(prompt, timeout)
        logger.debug("Model raw response: %.*s", RAW_TEXT_LOG_LIMIT, raw_text)

        recommendations = self._parser.parse(raw_text)
        if self._strip_unknown_ids:
            recommendations = strip_unknown_catalog_ids(recommendations, entries)
        return recommendations

    async def _invoke_with_retry(self, prompt: str, timeout: float | None) -> str:
        """Call the model, retrying transient failures only."""
        for attempt in range(1 + self._max_retries):
            try:
                return await self._invoke(prompt, timeout)
            except InvocationError as e:
                if not e.transient or attempt >= self._max_retries:
                    logger.error("Model invocation failed: %s", e)
                    raise
                logger.warning(
                    "Transient model failure, retrying (attempt %d): %s", attempt + 1, e
                )
                await asyncio.sleep(self._retry_delay)
        raise InvocationError("Model invocation failed")

    async def _invoke(self, prompt: str, timeout: float | None) -> str:
        try:
            return await asyncio.wait_for(self._llm.invoke(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise InvocationError(
                f"Model call timed out after {timeout}s", transient=True
            ) from e
