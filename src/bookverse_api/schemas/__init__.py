from bookverse_api.schemas.book import BookDetail, BookRead, PaginatedBooks
from bookverse_api.schemas.recommendation import RankedBook, RecommendationsResponse
from bookverse_api.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate
from bookverse_api.schemas.user import (
    FavoriteToggleRequest,
    FavoriteToggleResponse,
    UserProfile,
    UserRead,
)

__all__ = [
    "BookDetail",
    "BookRead",
    "FavoriteToggleRequest",
    "FavoriteToggleResponse",
    "PaginatedBooks",
    "RankedBook",
    "RecommendationsResponse",
    "ReviewCreate",
    "ReviewRead",
    "ReviewUpdate",
    "UserProfile",
    "UserRead",
]
