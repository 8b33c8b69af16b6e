"""FastAPI application factory — entry point for Shelfmate."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shelfmate.api.routes.recommendations import (
    invocation_error_handler,
    parse_error_handler,
    request_validation_handler,
    unhandled_error_middleware,
)
from shelfmate.api.routes.recommendations import router as recommendations_router
from shelfmate.config import settings
from shelfmate.dependencies import reset_dependencies
from shelfmate.domain.errors import InvocationError, ParseError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("Shelfmate starting up...")
    logger.info("Catalog backend: %s", settings.catalog_backend.value)
    logger.info("LLM provider: %s", settings.llm_provider.value)
    logger.info("Catalog sample size: %d", settings.catalog_sample_size)
    yield
    await reset_dependencies()
    logger.info("Shelfmate shutting down...")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Shelfmate",
        description="Catalog-grounded GenAI book recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    # Added before CORS so CORSMiddleware wraps it.
    application.middleware("http")(unhandled_error_middleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["OPTIONS", "POST", "GET"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ── Routes ─────────────────────────────────────
    application.include_router(recommendations_router)

    # ── Error Handlers ─────────────────────────────
    application.add_exception_handler(InvocationError, invocation_error_handler)
    application.add_exception_handler(ParseError, parse_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "shelfmate"}

    return application


app = create_app()
