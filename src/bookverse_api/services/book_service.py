from pydantic import PositiveInt, validate_call

from bookverse_api.domain import BookId
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.schemas.book import BookDetail, BookRead, PaginatedBooks

PAGE_SIZE = 10


class BookService:
    def __init__(self, repo: BooksRepository) -> None:
        self.repo = repo

    @validate_call
    def get_book(self, book_id: BookId) -> BookDetail | None:
        book = self.repo.get_with_reviews(book_id)
        if not book:
            return None
        return BookDetail.model_validate(book)

    @validate_call
    def get_books(self, page: PositiveInt = 1, search: str | None = None) -> PaginatedBooks:
        offset = (page - 1) * PAGE_SIZE
        items, total = self.repo.list_books(
            limit=PAGE_SIZE, offset=offset, search=search.strip() if search else None
        )

        return PaginatedBooks(
            items=[BookRead.model_validate(item) for item in items],
            total=total,
            page=page,
            size=PAGE_SIZE,
        )
