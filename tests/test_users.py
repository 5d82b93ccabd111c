"""Tests for user lookup and admin account removal."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from inkwell.models import User, UserSession
from inkwell.repositories import SessionRepository, UserRepository
from inkwell.services.auth import issue_refresh_token
from inkwell.services.errors import UserNotFoundError, ValidationFailedError
from inkwell.services.user_service import UserService
from tests.helpers import auth_headers, claims_for


@pytest.fixture
def users(db: Session) -> UserService:
    return UserService(UserRepository(db), SessionRepository(db))


class TestDeleteUser:
    def test_soft_delete_hides_user_and_ends_sessions(self, db, make_user, users) -> None:
        root, bob = make_user("root", is_super_admin=True), make_user("bob")
        issue_refresh_token(db, bob)

        users.delete_user(bob.id, claims_for(root))

        with pytest.raises(UserNotFoundError):
            users.get_user(bob.id)
        assert db.query(User).filter(User.id == bob.id).count() == 1
        assert db.query(UserSession).filter(UserSession.user_id == bob.id).count() == 0

    def test_cannot_delete_self(self, make_user, users) -> None:
        root = make_user("root", is_super_admin=True)
        with pytest.raises(ValidationFailedError):
            users.delete_user(root.id, claims_for(root))
        assert users.get_user(root.id).id == root.id

    def test_missing_user(self, make_user, users) -> None:
        root = make_user("root", is_super_admin=True)
        with pytest.raises(UserNotFoundError):
            users.delete_user(root.id + 100, claims_for(root))


class TestDeleteUserAPI:
    def test_admin_only(self, client_with_db, make_user) -> None:
        root, alice, bob = (
            make_user("root", is_super_admin=True),
            make_user("alice"),
            make_user("bob"),
        )

        denied = client_with_db.delete(f"/api/users/{bob.id}", headers=auth_headers(alice))
        assert denied.status_code == 403

        deleted = client_with_db.delete(f"/api/users/{bob.id}", headers=auth_headers(root))
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True

        assert client_with_db.get(f"/api/users/{bob.id}").status_code == 404
        again = client_with_db.delete(f"/api/users/{bob.id}", headers=auth_headers(root))
        assert again.status_code == 404

    def test_requires_auth(self, client_with_db, make_user) -> None:
        bob = make_user("bob")
        assert client_with_db.delete(f"/api/users/{bob.id}").status_code == 401
