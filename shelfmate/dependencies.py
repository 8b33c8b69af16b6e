"""
Process-scoped collaborators, built lazily on first use.

Catalog and model handles are created once per process and shared by all
requests. ``reset_dependencies`` exists for shutdown and tests only.
"""

import logging

from shelfmate.adapters.catalog.dynamodb import DynamoDBCatalogAdapter
from shelfmate.adapters.catalog.local import LocalCatalogAdapter
from shelfmate.adapters.llm.bedrock import BedrockLLMAdapter
from shelfmate.adapters.llm.mock import MockLLMAdapter
from shelfmate.adapters.llm.ollama import OllamaLLMAdapter
from shelfmate.adapters.llm.openai_adapter import OpenAILLMAdapter
from shelfmate.config import CatalogBackend, LLMProvider, Settings, settings
from shelfmate.ports.catalog import CatalogPort
from shelfmate.ports.llm import LLMPort
from shelfmate.ports.recommender import RecommenderPort
from shelfmate.services.catalog_sampler import CatalogSampler
from shelfmate.services.recommendation import RecommendationService

logger = logging.getLogger(__name__)

_catalog: CatalogPort | None = None
_llm: LLMPort | None = None
_recommender: RecommenderPort | None = None


def build_catalog(config: Settings) -> CatalogPort:
    """Construct the configured catalog adapter."""
    if config.catalog_backend is CatalogBackend.LOCAL:
        return LocalCatalogAdapter(config.catalog_file)
    return DynamoDBCatalogAdapter(config.catalog_table, config.aws_region)


def build_llm(config: Settings) -> LLMPort:
    """Construct the configured model adapter."""
    if config.llm_provider is LLMProvider.OPENAI:
        if not config.openai_api_key:
            raise ValueError("SHELFMATE_OPENAI_API_KEY is required for the openai provider")
        return OpenAILLMAdapter(config.openai_api_key, config.openai_model, config.llm_max_tokens)
    if config.llm_provider is LLMProvider.OLLAMA:
        return OllamaLLMAdapter(config.ollama_base_url, config.ollama_model, config.llm_max_tokens)
    if config.llm_provider is LLMProvider.MOCK:
        return MockLLMAdapter()
    return BedrockLLMAdapter(
        model_id=config.bedrock_model_id,
        region=config.aws_region,
        max_tokens=config.llm_max_tokens,
        anthropic_version=config.anthropic_version,
        read_timeout=config.llm_timeout_seconds,
    )


def get_catalog() -> CatalogPort:
    global _catalog
    if _catalog is None:
        _catalog = build_catalog(settings)
    return _catalog


def get_llm() -> LLMPort:
    global _llm
    if _llm is None:
        _llm = build_llm(settings)
    return _llm


def get_recommender() -> RecommenderPort:
    """FastAPI dependency returning the shared recommendation service."""
    global _recommender
    if _recommender is None:
        _recommender = RecommendationService(
            sampler=CatalogSampler(get_catalog()),
            llm=get_llm(),
            sample_size=settings.catalog_sample_size,
            default_query=settings.default_query,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            retry_delay=settings.llm_retry_delay_seconds,
            strip_unknown_ids=settings.strip_unknown_catalog_ids,
        )
        logger.info("Recommendation service initialized")
    return _recommender


async def reset_dependencies() -> None:
    """Close and forget all process-scoped collaborators."""
    global _catalog, _llm, _recommender
    if _llm is not None:
        await _llm.aclose()
    _catalog = _llm = _recommender = None
