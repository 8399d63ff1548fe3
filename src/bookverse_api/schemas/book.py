from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookverse_api.domain import BookId, ReviewId, UserId


class BookBase(BaseModel):
    title: str
    author: str
    description: str = ""
    genres: list[str] = Field(default_factory=list)
    published_year: int
    cover_image_url: str | None = None
    avg_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)


class BookRead(BookBase):
    id: BookId

    model_config = ConfigDict(from_attributes=True, frozen=True)


class BookReview(BaseModel):
    id: ReviewId
    user_id: UserId
    rating: int
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookDetail(BookRead):
    reviews: list[BookReview] = Field(default_factory=list)


class PaginatedBooks(BaseModel):
    items: list[BookRead]
    total: int
    page: int
    size: int
