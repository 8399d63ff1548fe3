import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from bookverse_api.domain import BookId, BookOrdering
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.schemas.book import BookRead
from bookverse_api.services.preference_signals import PreferenceSignals
from bookverse_api.services.scoring import Clock, score_book, utc_now

logger = logging.getLogger(__name__)

CANDIDATE_MULTIPLIER = 4
MIN_CANDIDATES = 30


@dataclass(frozen=True)
class CandidateSource:
    """A named catalog query used to gather or backfill candidates."""

    name: str
    order_by: tuple[BookOrdering, ...]


RECENT_POPULAR = CandidateSource(
    "recent_popular", ("published_year_desc", "avg_rating_desc", "review_count_desc")
)
EVERGREEN = CandidateSource("evergreen", ("review_count_desc", "avg_rating_desc"))
HIGHEST_RATED = CandidateSource("highest_rated", ("avg_rating_desc",))
TOP_RATED = CandidateSource("top_rated", ("avg_rating_desc", "review_count_desc"))
MOST_REVIEWED = CandidateSource("most_reviewed", ("review_count_desc", "avg_rating_desc"))

# tried in order until the target size is reached
ANONYMOUS_BACKFILL: tuple[CandidateSource, ...] = (HIGHEST_RATED,)
PERSONALIZED_BACKFILL: tuple[CandidateSource, ...] = (MOST_REVIEWED,)


def candidate_take(limit: int) -> int:
    return max(limit * CANDIDATE_MULTIPLIER, MIN_CANDIDATES)


def _extend_unique(
    result: list[BookRead], books: Iterable[BookRead], seen: set[BookId], target: int
) -> None:
    for book in books:
        if len(result) >= target:
            return
        if book.id in seen:
            continue
        seen.add(book.id)
        result.append(book)


class CandidatePoolBuilder:
    def __init__(self, books: BooksRepository, clock: Clock = utc_now) -> None:
        self.books = books
        self.clock = clock

    def fetch(self, source: CandidateSource, limit: int) -> list[BookRead]:
        rows = self.books.find_books(order_by=source.order_by, limit=limit)
        return [BookRead.model_validate(row) for row in rows]

    def backfill(
        self,
        sources: Sequence[CandidateSource],
        result: list[BookRead],
        seen: set[BookId],
        target: int,
    ) -> None:
        for source in sources:
            if len(result) >= target:
                return
            before = len(result)
            _extend_unique(result, self.fetch(source, target), seen, target)
            logger.debug(
                "Backfilled %s candidates from %s", len(result) - before, source.name
            )

    def top_rated(self, limit: int) -> list[BookRead]:
        return self.fetch(TOP_RATED, limit)

    def anonymous(self, limit: int) -> list[BookRead]:
        """Cold-start pool: recent hits interleaved with evergreen favourites."""
        target = limit * 2
        recent = self.fetch(RECENT_POPULAR, target)
        evergreen = self.fetch(EVERGREEN, target)

        result: list[BookRead] = []
        seen: set[BookId] = set()
        for index in range(max(len(recent), len(evergreen))):
            picks = recent if index % 2 == 0 else evergreen
            if index < len(picks):
                _extend_unique(result, [picks[index]], seen, target)
            if len(result) >= target:
                break

        self.backfill(ANONYMOUS_BACKFILL, result, seen, target)
        return result[:limit]

    def personalized(self, signals: PreferenceSignals, limit: int) -> list[BookRead]:
        """Scored pool of `candidate_take(limit)` books, favorites excluded, best first."""
        target = candidate_take(limit)
        raw = self.fetch(TOP_RATED, target * 2)

        unique: dict[BookId, BookRead] = {}
        for book in raw:
            unique.setdefault(book.id, book)

        now = self.clock()
        ranked = sorted(
            unique.values(), key=lambda book: score_book(book, signals, now), reverse=True
        )

        result: list[BookRead] = []
        seen: set[BookId] = set(signals.excluded_book_ids)
        _extend_unique(result, ranked, seen, target)
        self.backfill(PERSONALIZED_BACKFILL, result, seen, target)
        return result
