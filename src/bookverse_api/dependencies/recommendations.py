from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from bookverse_api.config import settings
from bookverse_api.dependencies.books import get_books_repository, get_reviews_repository
from bookverse_api.dependencies.users import get_favorites_repository
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.repositories.favorites_repository import FavoritesRepository
from bookverse_api.repositories.reviews_repository import ReviewsRepository
from bookverse_api.services.candidate_pool import CandidatePoolBuilder
from bookverse_api.services.llm_ranking import HuggingFaceRanker
from bookverse_api.services.preference_signals import PreferenceSignalExtractor
from bookverse_api.services.recommendation_cache import RecommendationCache
from bookverse_api.services.recommendation_service import RecommendationService


def get_recommendation_cache(request: Request) -> RecommendationCache:
    """The cache built at start-up and kept on the application state."""
    return request.app.state.recommendation_cache


@lru_cache
def get_ranker() -> HuggingFaceRanker:
    return HuggingFaceRanker.from_settings(settings)


def get_recommendation_service(
    books: Annotated[BooksRepository, Depends(get_books_repository)],
    favorites: Annotated[FavoritesRepository, Depends(get_favorites_repository)],
    reviews: Annotated[ReviewsRepository, Depends(get_reviews_repository)],
    cache: Annotated[RecommendationCache, Depends(get_recommendation_cache)],
    ranker: Annotated[HuggingFaceRanker, Depends(get_ranker)],
) -> RecommendationService:
    return RecommendationService(
        pool=CandidatePoolBuilder(books=books),
        signals=PreferenceSignalExtractor(favorites=favorites, reviews=reviews),
        cache=cache,
        ranker=ranker,
    )
