from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from bookverse_api.dependencies.database import get_db_session
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.repositories.reviews_repository import ReviewsRepository
from bookverse_api.services.book_service import BookService
from bookverse_api.services.review_service import ReviewService


def get_books_repository(session: Annotated[Session, Depends(get_db_session)]) -> BooksRepository:
    return BooksRepository(session=session)


def get_reviews_repository(
    session: Annotated[Session, Depends(get_db_session)],
) -> ReviewsRepository:
    return ReviewsRepository(session=session)


def get_book_service(
    repo: Annotated[BooksRepository, Depends(get_books_repository)],
) -> BookService:
    return BookService(repo=repo)


def get_review_service(
    reviews: Annotated[ReviewsRepository, Depends(get_reviews_repository)],
    books: Annotated[BooksRepository, Depends(get_books_repository)],
) -> ReviewService:
    return ReviewService(reviews=reviews, books=books)
