from collections.abc import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from bookverse_api.domain import BookId, BookOrdering
from bookverse_api.models import Book

_ORDERINGS: dict[BookOrdering, ColumnElement] = {
    "published_year_desc": Book.published_year.desc(),
    "avg_rating_desc": Book.avg_rating.desc(),
    "review_count_desc": Book.review_count.desc(),
}


class BooksRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, book_id: BookId) -> Book | None:
        return self.session.get(Book, book_id)

    def get_with_reviews(self, book_id: BookId) -> Book | None:
        stmt = select(Book).where(Book.id == book_id).options(selectinload(Book.reviews))
        return self.session.scalars(stmt).first()

    def find_books(
        self, order_by: Sequence[BookOrdering], limit: int, offset: int = 0
    ) -> Sequence[Book]:
        """
        Returns books sorted by the named orderings, with id ascending as the final tiebreak.
        """
        stmt = (
            select(Book)
            .order_by(*[_ORDERINGS[name] for name in order_by], Book.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return self.session.scalars(stmt).all()

    def list_books(
        self, limit: int = 10, offset: int = 0, search: str | None = None
    ) -> tuple[Sequence[Book], int]:
        """
        Returns a tuple of (items, total_count).
        """
        stmt = select(Book)
        count_stmt = select(func.count()).select_from(Book)

        if search:
            pattern = f"%{search.lower()}%"
            condition = or_(
                func.lower(Book.title).like(pattern), func.lower(Book.author).like(pattern)
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        stmt = stmt.order_by(Book.id.asc()).limit(limit).offset(offset)

        total = self.session.execute(count_stmt).scalar_one()
        items = self.session.scalars(stmt).all()

        return items, total
