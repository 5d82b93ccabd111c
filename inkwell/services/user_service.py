"""User lookup and account removal."""

from __future__ import annotations

import logging

from inkwell.models import User
from inkwell.repositories.session import SessionRepository
from inkwell.repositories.user import UserRepository
from inkwell.services.auth import TokenClaims
from inkwell.services.errors import UserNotFoundError, ValidationFailedError
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository, sessions: SessionRepository) -> None:
        self.users = users
        self.sessions = sessions

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def list_users(self, page: Pagination) -> tuple[list[User], int]:
        return self.users.list(page)

    def delete_user(self, user_id: int, claims: TokenClaims) -> None:
        """Soft delete an account and end its refresh sessions.

        The username and email stay reserved. Admins cannot delete themselves.
        """
        if user_id == claims.user_id:
            raise ValidationFailedError("you cannot delete your own account")
        self.users.soft_delete(user_id)
        self.sessions.delete_for_user(user_id)
        logger.warning("User soft-deleted: id=%s by user_id=%s", user_id, claims.user_id)
