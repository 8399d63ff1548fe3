import logging
from collections.abc import Callable

from pydantic import PositiveInt, ValidationError, validate_call
from sqlalchemy.exc import SQLAlchemyError

from bookverse_api.domain import RecommendationMode, UserId
from bookverse_api.errors import RecommendationUnavailableError
from bookverse_api.schemas.book import BookRead
from bookverse_api.services.candidate_pool import CandidatePoolBuilder
from bookverse_api.services.llm_ranking import (
    HuggingFaceRanker,
    build_profile_summary,
    merge_ranking,
)
from bookverse_api.services.preference_signals import PreferenceSignalExtractor
from bookverse_api.services.recommendation_cache import RecommendationCache

logger = logging.getLogger(__name__)


class RecommendationService:
    """Entry points for the hybrid, top-rated and model-ranked recommendation modes."""

    def __init__(
        self,
        pool: CandidatePoolBuilder,
        signals: PreferenceSignalExtractor,
        cache: RecommendationCache,
        ranker: HuggingFaceRanker | None = None,
    ) -> None:
        self.pool = pool
        self.signals = signals
        self.cache = cache
        self.ranker = ranker

    @validate_call
    def get_hybrid_recommendations(
        self, user_id: UserId | None, limit: PositiveInt
    ) -> list[BookRead]:
        def compute() -> list[BookRead]:
            if user_id is None:
                return self.pool.anonymous(limit)
            return self.pool.personalized(self.signals.extract(user_id), limit)

        return self._serve("hybrid", user_id, limit, compute)

    @validate_call
    def get_top_rated_recommendations(self, limit: PositiveInt) -> list[BookRead]:
        return self._serve("toprated", None, limit, lambda: self.pool.top_rated(limit))

    @validate_call
    def get_llm_recommendations(self, user_id: UserId | None, limit: PositiveInt) -> list[BookRead]:
        def compute() -> list[BookRead]:
            signals = self.signals.extract(user_id)
            pool = self.pool.personalized(signals, limit)
            if self.ranker is None or not self.ranker.enabled:
                return pool
            ranking = self.ranker.rank(pool, build_profile_summary(signals), limit)
            if ranking is None or not ranking.order:
                return pool
            return merge_ranking(pool, ranking.order)

        return self._serve("llm", user_id, limit, compute)

    def _serve(
        self,
        mode: RecommendationMode,
        user_id: UserId | None,
        limit: int,
        compute: Callable[[], list[BookRead]],
    ) -> list[BookRead]:
        key = self.cache.make_key(mode, user_id, limit)
        cached = self.cache.get(key)
        if cached is not None:
            self._log_served(mode, user_id, limit, cached, cache_hit=True)
            return cached

        try:
            books = compute()[:limit]
        except (SQLAlchemyError, ValidationError) as exc:
            # a failed query or a stored row that no longer fits the book schema
            logger.exception("Failed to compute %s recommendations", mode)
            raise RecommendationUnavailableError("Failed to fetch recommendations.") from exc

        self.cache.set(key, books)
        self._log_served(mode, user_id, limit, books, cache_hit=False)
        return books

    def _log_served(
        self,
        mode: RecommendationMode,
        user_id: UserId | None,
        limit: int,
        books: list[BookRead],
        cache_hit: bool,
    ) -> None:
        logger.info(
            "recommendations_served",
            extra={
                "mode": mode,
                "user_id": user_id,
                "limit": limit,
                "returned_count": len(books),
                "cache_hit": cache_hit,
            },
        )
