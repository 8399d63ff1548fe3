import re
from dataclasses import dataclass, field

from bookverse_api.domain import BookId, UserId
from bookverse_api.models import Book
from bookverse_api.repositories.favorites_repository import FavoritesRepository
from bookverse_api.repositories.reviews_repository import ReviewsRepository

FAVORITES_TAKE = 25
REVIEWS_TAKE = 20

FAVORITE_WEIGHT = 1.0
REVIEW_WEIGHT = 0.5
KEYWORD_WEIGHT_CAP = 5.0

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Lowercase alphanumeric runs of 4 to 30 characters, repeats kept."""
    return [token for token in _TOKEN_SPLIT.split(text.lower()) if 4 <= len(token) <= 30]


@dataclass
class PreferenceSignals:
    """Weighted reader preferences derived from favorites and recent reviews."""

    genre_weights: dict[str, float] = field(default_factory=dict)
    author_weights: dict[str, float] = field(default_factory=dict)
    keyword_weights: dict[str, float] = field(default_factory=dict)
    excluded_book_ids: set[BookId] = field(default_factory=set)
    recent_titles: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.genre_weights
            or self.author_weights
            or self.keyword_weights
            or self.excluded_book_ids
            or self.recent_titles
        )

    def add_book(self, book: Book, weight: float) -> None:
        for genre in book.genres or []:
            key = genre.lower()
            self.genre_weights[key] = self.genre_weights.get(key, 0.0) + weight
        author = book.author.lower()
        self.author_weights[author] = self.author_weights.get(author, 0.0) + weight

    def add_keywords(self, text: str, weight: float) -> None:
        for token in tokenize(text):
            current = self.keyword_weights.get(token, 0.0)
            self.keyword_weights[token] = min(current + weight, KEYWORD_WEIGHT_CAP)


class PreferenceSignalExtractor:
    def __init__(self, favorites: FavoritesRepository, reviews: ReviewsRepository) -> None:
        self.favorites = favorites
        self.reviews = reviews

    def extract(self, user_id: UserId | None) -> PreferenceSignals:
        signals = PreferenceSignals()
        if user_id is None:
            return signals

        for favorite in self.favorites.list_recent_for_user(user_id, limit=FAVORITES_TAKE):
            book = favorite.book
            signals.excluded_book_ids.add(BookId(favorite.book_id))
            signals.add_book(book, FAVORITE_WEIGHT)
            signals.add_keywords(f"{book.title} {book.description or ''}", FAVORITE_WEIGHT)

        for review in self.reviews.list_recent_for_user(user_id, limit=REVIEWS_TAKE):
            signals.recent_titles.append(review.book.title)
            signals.add_book(review.book, REVIEW_WEIGHT)
            signals.add_keywords(review.text, REVIEW_WEIGHT)

        return signals
