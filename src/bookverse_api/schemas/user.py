from pydantic import BaseModel, Field

from bookverse_api.domain import BookId, UserId
from bookverse_api.schemas.book import BookRead


class UserRead(BaseModel):
    id: UserId = Field(description="Unique ID of the user", examples=[42])
    name: str = Field(description="Display name", examples=["Ada"])
    email: str = Field(description="Contact email", examples=["ada@example.com"])


class UserProfile(UserRead):
    favorites: list[BookRead] = Field(
        default_factory=list, description="Books the user has favorited, newest first"
    )


class FavoriteToggleRequest(BaseModel):
    book_id: BookId = Field(description="Book to add to or remove from favorites", examples=[7])


class FavoriteToggleResponse(BaseModel):
    book_id: BookId
    favorited: bool = Field(description="Whether the book is a favorite after the toggle")
    message: str = Field(examples=["Book added to favorites."])
