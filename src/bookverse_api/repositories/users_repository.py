from sqlalchemy.orm import Session

from bookverse_api.domain import UserId
from bookverse_api.models import User


class UsersRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: UserId) -> User | None:
        return self.session.get(User, user_id)
