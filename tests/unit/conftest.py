from datetime import UTC, datetime
from typing import Any

from bookverse_api.models import Book
from bookverse_api.schemas.book import BookRead

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _book_fields(book_id: int, **overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "id": book_id,
        "title": f"Book {book_id}",
        "author": f"Author {book_id}",
        "description": "",
        "genres": [],
        "published_year": 2000,
        "cover_image_url": None,
        "avg_rating": 3.0,
        "review_count": 0,
    }
    fields.update(overrides)
    return fields


def make_book(book_id: int, **overrides: Any) -> BookRead:
    return BookRead(**_book_fields(book_id, **overrides))


def make_orm_book(book_id: int, **overrides: Any) -> Book:
    return Book(**_book_fields(book_id, **overrides))
