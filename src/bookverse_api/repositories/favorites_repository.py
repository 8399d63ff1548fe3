from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookverse_api.domain import BookId, UserId
from bookverse_api.models import Favorite


class FavoritesRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: UserId, book_id: BookId) -> Favorite | None:
        stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.book_id == book_id)
        return self.session.scalars(stmt).first()

    def list_recent_for_user(self, user_id: UserId, limit: int) -> Sequence[Favorite]:
        """
        Newest favorites first, each with its book loaded.
        """
        stmt = (
            select(Favorite)
            .where(Favorite.user_id == user_id)
            .options(selectinload(Favorite.book))
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()

    def add(self, user_id: UserId, book_id: BookId) -> Favorite:
        favorite = Favorite(user_id=user_id, book_id=book_id)
        self.session.add(favorite)
        self.session.commit()
        self.session.refresh(favorite)
        return favorite

    def remove(self, favorite: Favorite) -> None:
        self.session.delete(favorite)
        self.session.commit()
