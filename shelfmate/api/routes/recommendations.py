"""Recommendation routes."""

import logging

from fastapi import APIRouter, Body, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from shelfmate.api.schemas import (
    ErrorResponse,
    RecommendationItem,
    RecommendationsResponse,
    RecommendRequest,
)
from shelfmate.dependencies import get_recommender
from shelfmate.domain.errors import InvocationError, ParseError
from shelfmate.ports.recommender import RecommenderPort

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Recommendations"])

INTERNAL_ERROR = "Internal Server Error"


@router.post(
    "/recommendations",
    response_model=RecommendationsResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
async def recommend(
    data: RecommendRequest | None = Body(default=None),
    recommender: RecommenderPort = Depends(get_recommender),
) -> RecommendationsResponse:
    """Get catalog-grounded book recommendations for a free-text query."""
    query = data.query if data else None
    results = await recommender.recommend(query)
    return RecommendationsResponse(
        recommendations=[RecommendationItem.from_domain(r) for r in results]
    )


# ── Error mapping ──────────────────────────────────
# Only a short fixed message reaches the caller; details stay in the logs.

async def invocation_error_handler(request: Request, exc: InvocationError) -> JSONResponse:
    logger.error("Recommendation failed at model invocation: %s", exc)
    body = ErrorResponse(error=INTERNAL_ERROR, details="Recommendation model invocation failed")
    return JSONResponse(status_code=500, content=body.model_dump())


async def parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
    logger.error("Recommendation failed at parsing: %s (%d chars of model text)", exc, len(exc.raw_text))
    body = ErrorResponse(error=INTERNAL_ERROR, details="Failed to parse AI response")
    return JSONResponse(status_code=500, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request: %d validation errors", len(exc.errors()))
    body = ErrorResponse(error="Bad Request", details="Request body must be a JSON object")
    return JSONResponse(status_code=422, content=body.model_dump())


async def unhandled_error_middleware(request: Request, call_next) -> Response:
    """Map any unexpected failure to the JSON failure body."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = ErrorResponse(error=INTERNAL_ERROR, details="Unexpected server error")
        return JSONResponse(status_code=500, content=body.model_dump())
