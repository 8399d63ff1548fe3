import logging

from pydantic import validate_call

from bookverse_api.domain import BookId, ReviewId, UserId
from bookverse_api.errors import (
    BookNotFoundError,
    DuplicateReviewError,
    ReviewNotFoundError,
    ReviewPermissionError,
)
from bookverse_api.models import Review
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.repositories.reviews_repository import ReviewsRepository
from bookverse_api.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, reviews: ReviewsRepository, books: BooksRepository) -> None:
        self.reviews = reviews
        self.books = books

    @validate_call
    def create_review(self, user_id: UserId, book_id: BookId, payload: ReviewCreate) -> ReviewRead:
        if self.books.get_by_id(book_id) is None:
            raise BookNotFoundError(f"Book with id {book_id} not found")
        if self.reviews.get_for_user_and_book(user_id, book_id) is not None:
            raise DuplicateReviewError(f"User {user_id} already reviewed book {book_id}")

        review = self.reviews.create(
            user_id=user_id, book_id=book_id, rating=payload.rating, text=payload.text
        )
        logger.info("Review %s created for book %s", review.id, book_id)
        return ReviewRead.model_validate(review)

    @validate_call
    def update_review(
        self, user_id: UserId, review_id: ReviewId, payload: ReviewUpdate
    ) -> ReviewRead:
        review = self._get_owned(user_id, review_id)
        updated = self.reviews.update(review, rating=payload.rating, text=payload.text)
        return ReviewRead.model_validate(updated)

    @validate_call
    def delete_review(self, user_id: UserId, review_id: ReviewId) -> None:
        review = self._get_owned(user_id, review_id)
        self.reviews.delete(review)
        logger.info("Review %s deleted", review_id)

    def _get_owned(self, user_id: UserId, review_id: ReviewId) -> Review:
        review = self.reviews.get_by_id(review_id)
        if review is None:
            raise ReviewNotFoundError(f"Review with id {review_id} not found")
        if review.user_id != user_id:
            raise ReviewPermissionError("Forbidden: Not review author.")
        return review
