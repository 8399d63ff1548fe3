import math
from collections.abc import Callable
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bookverse_api.dependencies.auth import get_optional_user_id
from bookverse_api.dependencies.recommendations import get_recommendation_service
from bookverse_api.domain import UserId
from bookverse_api.errors import RecommendationUnavailableError
from bookverse_api.schemas.book import BookRead
from bookverse_api.schemas.recommendation import (
    Pagination,
    RankedBook,
    RecommendationsResponse,
)
from bookverse_api.services.recommendation_service import RecommendationService

router = APIRouter(prefix="/recommendations", tags=["recommendations"])

DEFAULT_LIMIT = 10
MAX_LIMIT = 50

_RESPONSES = {
    401: {"description": "Malformed X-User-Id header"},
    500: {"description": "Failed to fetch recommendations"},
}


def relevance_score(position: int) -> float:
    """Display-only score for a zero-based rank position; strictly decreasing."""
    return round(1 / (1 + 0.1 * position), 4)


def _paginate(
    mode: Literal["hybrid", "top-rated", "llm"],
    page: int,
    limit: int,
    fetch: Callable[[int], list[BookRead]],
) -> RecommendationsResponse:
    page = max(page, 1)
    limit = min(limit, MAX_LIMIT)
    try:
        books = fetch(page * limit)
    except RecommendationUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch recommendations.",
        ) from exc

    start = (page - 1) * limit
    page_items = [
        RankedBook(**book.model_dump(), relevance_score=relevance_score(start + offset))
        for offset, book in enumerate(books[start : start + limit])
    ]
    return RecommendationsResponse(
        mode=mode,
        recommendations=page_items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=len(books),
            total_pages=math.ceil(len(books) / limit),
        ),
    )


@router.get("", response_model=RecommendationsResponse, responses=_RESPONSES)
def read_hybrid_recommendations(
    user_id: Annotated[UserId | None, Depends(get_optional_user_id)],
    svc: Annotated[RecommendationService, Depends(get_recommendation_service)],
    page: int = Query(1, description="Page number, values below 1 read as 1"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, description=f"Items per page, at most {MAX_LIMIT}"),
) -> RecommendationsResponse:
    """Personalised recommendations, or a cold-start mix for anonymous callers."""
    return _paginate(
        "hybrid", page, limit, lambda depth: svc.get_hybrid_recommendations(user_id, depth)
    )


@router.get("/top-rated", response_model=RecommendationsResponse, responses=_RESPONSES)
def read_top_rated_recommendations(
    svc: Annotated[RecommendationService, Depends(get_recommendation_service)],
    page: int = Query(1, description="Page number, values below 1 read as 1"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, description=f"Items per page, at most {MAX_LIMIT}"),
) -> RecommendationsResponse:
    """Highest rated books, independent of the caller."""
    return _paginate("top-rated", page, limit, svc.get_top_rated_recommendations)


@router.get("/llm", response_model=RecommendationsResponse, responses=_RESPONSES)
def read_llm_recommendations(
    user_id: Annotated[UserId | None, Depends(get_optional_user_id)],
    svc: Annotated[RecommendationService, Depends(get_recommendation_service)],
    page: int = Query(1, description="Page number, values below 1 read as 1"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, description=f"Items per page, at most {MAX_LIMIT}"),
) -> RecommendationsResponse:
    """Heuristic pool re-ranked by the configured text-generation model, when enabled."""
    return _paginate(
        "llm", page, limit, lambda depth: svc.get_llm_recommendations(user_id, depth)
    )
