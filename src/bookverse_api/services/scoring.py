"""Linear, explainable scoring of candidate books.

The score sums intrinsic quality (rating, review volume, description richness,
recency) with bonuses for matching the reader's preference signals, and adds a
small pseudo-random jitter that is stable for one calendar day.
"""

from collections.abc import Callable
from datetime import UTC, date, datetime

from bookverse_api.schemas.book import BookRead
from bookverse_api.services.preference_signals import PreferenceSignals

Clock = Callable[[], datetime]

GENRE_MATCH_BONUS = 0.35
FAVORITE_PENALTY = 0.5
JITTER_SCALE = 0.1


def utc_now() -> datetime:
    return datetime.now(UTC)


def stable_hash(value: str) -> int:
    """32-bit multiplicative string hash."""
    result = 0
    for char in value:
        result = (31 * result + ord(char)) & 0xFFFFFFFF
    return result


def day_jitter(book_id: int, day: date) -> float:
    return (stable_hash(f"{book_id}:{day.isoformat()}") % 1000) / 1000 * JITTER_SCALE


def quality_score(book: BookRead, current_year: int) -> float:
    score = book.avg_rating / 5
    score += min(book.review_count / 500, 0.35)
    score += min(len(book.description or "") / 4000, 0.4)
    recency = max(0.0, 1 - min((current_year - book.published_year) / 40, 1))
    score += recency * 0.25
    return score


def preference_score(book: BookRead, signals: PreferenceSignals) -> float:
    score = 0.0
    genres = [genre.lower() for genre in book.genres]

    if any(genre in signals.genre_weights for genre in genres):
        score += GENRE_MATCH_BONUS
        for genre in genres:
            weight = signals.genre_weights.get(genre)
            if weight:
                score += min(weight * 0.05, 0.25)

    author_weight = signals.author_weights.get(book.author.lower())
    if author_weight:
        score += min(author_weight * 0.1, 0.3)

    # substring match, so overlapping keywords may each contribute
    description = (book.description or "").lower()
    for keyword, weight in signals.keyword_weights.items():
        if keyword in description:
            score += min(weight * 0.03, 0.3)

    if book.id in signals.excluded_book_ids:
        score -= FAVORITE_PENALTY

    return score


def score_book(book: BookRead, signals: PreferenceSignals, now: datetime) -> float:
    score = quality_score(book, now.year)
    if not signals.is_empty:
        score += preference_score(book, signals)
    return score + day_jitter(book.id, now.date())
