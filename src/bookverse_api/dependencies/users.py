from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from bookverse_api.dependencies.books import get_books_repository
from bookverse_api.dependencies.database import get_db_session
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.repositories.favorites_repository import FavoritesRepository
from bookverse_api.repositories.users_repository import UsersRepository
from bookverse_api.services.user_service import UserService


def get_users_repository(session: Annotated[Session, Depends(get_db_session)]) -> UsersRepository:
    return UsersRepository(session=session)


def get_favorites_repository(
    session: Annotated[Session, Depends(get_db_session)],
) -> FavoritesRepository:
    return FavoritesRepository(session=session)


def get_user_service(
    users: Annotated[UsersRepository, Depends(get_users_repository)],
    favorites: Annotated[FavoritesRepository, Depends(get_favorites_repository)],
    books: Annotated[BooksRepository, Depends(get_books_repository)],
) -> UserService:
    return UserService(users=users, favorites=favorites, books=books)
