"""User repository."""

from __future__ import annotations

from sqlalchemy.orm import Query

from inkwell.models import User
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import UserExistsError, UserNotFoundError
from inkwell.services.pagination import Pagination


class UserRepository(BaseRepository):
    def _live(self) -> Query[User]:
        return self.db.query(User).filter(User.deleted_at.is_(None))

    def get(self, user_id: int) -> User | None:
        return self._live().filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        return self._live().filter(User.username == username).first()

    def get_by_email(self, email: str) -> User | None:
        return self._live().filter(User.email == email).first()

    def username_taken(self, username: str) -> bool:
        # Tombstoned users keep their username reserved by the unique constraint.
        return self.db.query(
            self.db.query(User).filter(User.username == username).exists()
        ).scalar()

    def get_by_login(self, login: str) -> User | None:
        """Look a user up by username or email."""
        return self._live().filter((User.username == login) | (User.email == login)).first()

    def exists(self, user_id: int) -> bool:
        return self.db.query(self._live().filter(User.id == user_id).exists()).scalar()

    def list(self, page: Pagination) -> tuple[list[User], int]:
        return self.paginate(self._live().order_by(User.created_at.desc(), User.id.desc()), page)

    def create(self, user: User) -> User:
        self.db.add(user)
        self.commit(conflict=UserExistsError("username or email already registered"))
        self.db.refresh(user)
        return user

    def soft_delete(self, user_id: int) -> None:
        user = self.get(user_id)
        if user is None:
            raise UserNotFoundError()
        user.mark_deleted()
        self.commit()
