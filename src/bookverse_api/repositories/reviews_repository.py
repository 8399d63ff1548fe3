from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from bookverse_api.domain import BookId, ReviewId, UserId
from bookverse_api.models import Book, Review


class ReviewsRepository:
    """Review persistence. Every write recomputes the reviewed book's rating aggregates."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, review_id: ReviewId) -> Review | None:
        return self.session.get(Review, review_id)

    def get_for_user_and_book(self, user_id: UserId, book_id: BookId) -> Review | None:
        stmt = select(Review).where(Review.user_id == user_id, Review.book_id == book_id)
        return self.session.scalars(stmt).first()

    def list_recent_for_user(self, user_id: UserId, limit: int) -> Sequence[Review]:
        """
        Newest reviews first, each with its book loaded.
        """
        stmt = (
            select(Review)
            .where(Review.user_id == user_id)
            .options(selectinload(Review.book))
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()

    def create(self, user_id: UserId, book_id: BookId, rating: int, text: str) -> Review:
        review = Review(user_id=user_id, book_id=book_id, rating=rating, text=text)
        self.session.add(review)
        self.session.flush()
        self._recalculate_book_stats(book_id)
        self.session.commit()
        self.session.refresh(review)
        return review

    def update(self, review: Review, rating: int | None = None, text: str | None = None) -> Review:
        if rating is not None:
            review.rating = rating
        if text is not None:
            review.text = text
        self.session.flush()
        self._recalculate_book_stats(review.book_id)
        self.session.commit()
        self.session.refresh(review)
        return review

    def delete(self, review: Review) -> None:
        book_id = review.book_id
        self.session.delete(review)
        self.session.flush()
        self._recalculate_book_stats(book_id)
        self.session.commit()

    def _recalculate_book_stats(self, book_id: int) -> None:
        count, average = self.session.execute(
            select(func.count(Review.id), func.avg(Review.rating)).where(Review.book_id == book_id)
        ).one()
        book = self.session.get(Book, book_id)
        if book is None:
            return
        book.review_count = count
        book.avg_rating = round(float(average), 1) if count else 0.0
