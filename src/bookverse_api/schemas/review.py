from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookverse_api.domain import BookId, Rating, ReviewId, UserId


class ReviewCreate(BaseModel):
    rating: Rating = Field(description="Star rating from 1 to 5", examples=[4])
    text: str = Field(min_length=1, description="Review body", examples=["A gripping read."])


class ReviewUpdate(BaseModel):
    rating: Rating | None = Field(default=None, description="New star rating", examples=[5])
    text: str | None = Field(default=None, min_length=1, description="New review body")


class ReviewRead(BaseModel):
    id: ReviewId
    user_id: UserId
    book_id: BookId
    rating: int
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewDeleted(BaseModel):
    message: str = "Review deleted."
