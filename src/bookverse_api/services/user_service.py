from pydantic import validate_call

from bookverse_api.domain import BookId, UserId
from bookverse_api.errors import BookNotFoundError
from bookverse_api.repositories.books_repository import BooksRepository
from bookverse_api.repositories.favorites_repository import FavoritesRepository
from bookverse_api.repositories.users_repository import UsersRepository
from bookverse_api.schemas.book import BookRead
from bookverse_api.schemas.user import FavoriteToggleResponse, UserProfile

PROFILE_FAVORITES_LIMIT = 100


class UserService:
    def __init__(
        self,
        users: UsersRepository,
        favorites: FavoritesRepository,
        books: BooksRepository,
    ) -> None:
        self.users = users
        self.favorites = favorites
        self.books = books

    @validate_call
    def get_profile(self, user_id: UserId) -> UserProfile | None:
        user = self.users.get_by_id(user_id)
        if user is None:
            return None
        favorites = self.favorites.list_recent_for_user(user_id, limit=PROFILE_FAVORITES_LIMIT)
        return UserProfile(
            id=UserId(user.id),
            name=user.name,
            email=user.email,
            favorites=[BookRead.model_validate(fav.book) for fav in favorites],
        )

    @validate_call
    def toggle_favorite(self, user_id: UserId, book_id: BookId) -> FavoriteToggleResponse:
        if self.books.get_by_id(book_id) is None:
            raise BookNotFoundError(f"Book with id {book_id} not found")

        existing = self.favorites.get(user_id, book_id)
        if existing is not None:
            self.favorites.remove(existing)
            return FavoriteToggleResponse(
                book_id=book_id, favorited=False, message="Book removed from favorites."
            )

        self.favorites.add(user_id, book_id)
        return FavoriteToggleResponse(
            book_id=book_id, favorited=True, message="Book added to favorites."
        )
