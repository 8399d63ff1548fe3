import pytest
from sqlalchemy.orm import Session

from bookverse_api.models import Book, Favorite, Review, User


class DataFactory:
    def __init__(self, session: Session):
        self.session = session

    def create_user(self, name: str = "Reader", email: str | None = None) -> User:
        user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com")
        self.session.add(user)
        self.session.flush()
        return user

    def create_book(self, title: str = "Test Book", **kwargs) -> Book:
        kwargs.setdefault("author", "Test Author")
        kwargs.setdefault("description", "")
        kwargs.setdefault("genres", [])
        kwargs.setdefault("published_year", 2020)
        kwargs.setdefault("avg_rating", 0.0)
        kwargs.setdefault("review_count", 0)
        book = Book(title=title, **kwargs)
        self.session.add(book)
        self.session.flush()
        return book

    def create_books(self, count: int, title_prefix: str = "Book ") -> list[Book]:
        return [self.create_book(title=f"{title_prefix}{i}") for i in range(1, count + 1)]

    def create_favorite(self, user: User, book: Book) -> Favorite:
        favorite = Favorite(user_id=user.id, book_id=book.id)
        self.session.add(favorite)
        self.session.flush()
        return favorite

    def create_review(self, user: User, book: Book, rating: int = 4, text: str = "Nice") -> Review:
        review = Review(user_id=user.id, book_id=book.id, rating=rating, text=text)
        self.session.add(review)
        self.session.flush()
        return review

    def commit(self):
        self.session.commit()


@pytest.fixture
def test_data(db_session: Session) -> DataFactory:
    return DataFactory(db_session)


@pytest.fixture
def reader(test_data: DataFactory) -> User:
    user = test_data.create_user(name="Test Reader")
    test_data.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}
