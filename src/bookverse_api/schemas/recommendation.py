from typing import Literal

from pydantic import BaseModel, Field

from bookverse_api.schemas.book import BookRead


class RankedBook(BookRead):
    relevance_score: float = Field(
        description="Display-only score that decreases with rank position",
        examples=[0.95],
        gt=0.0,
        le=1.0,
    )


class Pagination(BaseModel):
    page: int = Field(description="Current page, starting at 1", examples=[1])
    limit: int = Field(description="Items per page", examples=[10])
    total: int = Field(description="Number of recommendations computed up to this page")
    total_pages: int = Field(description="Number of pages available for `total` items")


class RecommendationsResponse(BaseModel):
    mode: Literal["hybrid", "top-rated", "llm"] = Field(
        description="Strategy that produced the list", examples=["hybrid"]
    )
    recommendations: list[RankedBook] = Field(description="Ranked books for the requested page")
    pagination: Pagination
