"""Application settings loaded from environment variables / .env."""

from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogBackend(str, Enum):
    DYNAMODB = "dynamodb"
    LOCAL = "local"


class LLMProvider(str, Enum):
    BEDROCK = "bedrock"
    OPENAI = "openai"
    OLLAMA = "ollama"
    MOCK = "mock"


class Settings(BaseSettings):
    """Process-wide configuration. Read once at import time."""

    model_config = SettingsConfigDict(
        env_prefix="SHELFMATE_",
        env_file=".env",
        extra="ignore",
    )

    # ── Catalog ─────────────────────────────────────
    catalog_backend: CatalogBackend = CatalogBackend.DYNAMODB
    aws_region: str = "us-east-1"
    catalog_table: str = "Books"
    catalog_file: str = "./data/catalog.json"
    catalog_sample_size: int = 20

    # ── LLM ─────────────────────────────────────────
    llm_provider: LLMProvider = LLMProvider.BEDROCK
    bedrock_model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"
    anthropic_version: str = "bedrock-2023-05-31"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.1"
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 60.0
    llm_max_retries: int = 1
    llm_retry_delay_seconds: float = 1.0

    # ── Recommendations ─────────────────────────────
    default_query: str = "recommend me a book"
    strip_unknown_catalog_ids: bool = True

    log_level: str = "INFO"


settings = Settings()
