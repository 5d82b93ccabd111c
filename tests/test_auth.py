"""Tests for authentication: passwords, tokens, claims and the auth routes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from inkwell.models import UserSession
from inkwell.models.user import User
from inkwell.services.auth import (
    TokenClaims,
    authenticate_user,
    change_password,
    claims_from_payload,
    create_access_token,
    create_user,
    create_user_token,
    decode_access_token,
    decode_claims,
    hash_refresh_token,
    is_username_available,
    issue_refresh_token,
    refresh_session,
    revoke_refresh_token,
)
from inkwell.services.errors import UnauthorizedError, UserExistsError, ValidationFailedError
from tests.helpers import auth_headers
from tests.test_constants import (
    TEST_ACCESS_TOKEN_PLACEHOLDER,
    TEST_PASSWORD,
    TEST_PASSWORD_WRONG,
    TEST_USERNAME,
)


def _make_user(username: str = TEST_USERNAME, password: str | None = None) -> User:
    """Create a User instance with a hashed password (no DB)."""
    user = User(id=1, username=username, is_super_admin=False)
    user.set_password(password if password is not None else TEST_PASSWORD)
    return user


class TestPasswordVerification:
    def test_correct_password(self):
        user = _make_user(password=TEST_PASSWORD)
        assert user.verify_password(TEST_PASSWORD) is True

    def test_wrong_password(self):
        user = _make_user(password=TEST_PASSWORD)
        assert user.verify_password(TEST_PASSWORD_WRONG) is False

    def test_hash_is_not_plaintext(self):
        assert _make_user().password_hash != TEST_PASSWORD


class TestAccessToken:
    def test_create_and_decode_token(self):
        token = create_access_token(data={"sub": "1"})
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["sub"] == "1"
        assert "exp" in payload

    def test_invalid_token_returns_none(self):
        assert decode_access_token(TEST_ACCESS_TOKEN_PLACEHOLDER) is None

    def test_tampered_token_returns_none(self):
        token = create_access_token(data={"sub": "1"})
        assert decode_access_token(token[:-4] + "XXXX") is None

    def test_expired_token_returns_none(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None


class TestClaims:
    def test_user_token_round_trips_to_claims(self):
        user = _make_user()
        user.is_super_admin = True
        assert decode_claims(create_user_token(user)) == TokenClaims(1, True)

    def test_string_admin_flag(self):
        claims = claims_from_payload({"user_id": "7", "is_super_admin": "true"})
        assert claims == TokenClaims(user_id=7, is_super_admin=True)

    def test_missing_user_id(self):
        assert claims_from_payload({"is_super_admin": True}) is None

    def test_sub_fallback(self):
        assert claims_from_payload({"sub": "3"}) == TokenClaims(user_id=3)


class TestUserAccounts:
    def test_duplicate_username(self, db, make_user):
        make_user("alice")
        with pytest.raises(UserExistsError, match="username already taken"):
            create_user(db, "alice", "other@example.com", TEST_PASSWORD)

    def test_duplicate_email(self, db, make_user):
        make_user("alice")
        with pytest.raises(UserExistsError, match="email already registered"):
            create_user(db, "alice2", "alice@example.com", TEST_PASSWORD)

    def test_authenticate_by_username_or_email(self, db, make_user):
        user = make_user("alice")
        assert authenticate_user(db, "alice", TEST_PASSWORD).id == user.id
        assert authenticate_user(db, "alice@example.com", TEST_PASSWORD).id == user.id
        assert authenticate_user(db, "alice", TEST_PASSWORD_WRONG) is None
        assert authenticate_user(db, "nobody", TEST_PASSWORD) is None


class TestRefreshSessions:
    def test_issue_stores_only_digest(self, db, make_user):
        user = make_user("alice")
        token = issue_refresh_token(db, user)

        session = db.query(UserSession).one()
        assert session.user_id == user.id
        assert session.token_hash == hash_refresh_token(token)
        assert token not in session.token_hash

    def test_refresh_rotates_token(self, db, make_user):
        user = make_user("alice")
        old = issue_refresh_token(db, user)

        access, new, refreshed_user = refresh_session(db, old)

        assert refreshed_user.id == user.id
        assert decode_claims(access).user_id == user.id
        assert new != old
        with pytest.raises(UnauthorizedError):
            refresh_session(db, old)
        assert db.query(UserSession).count() == 1

    def test_unknown_token_rejected(self, db):
        with pytest.raises(UnauthorizedError, match="invalid or expired token"):
            refresh_session(db, "rt_unknown")

    def test_expired_session_removed(self, db, make_user):
        user = make_user("alice")
        token = issue_refresh_token(db, user)
        session = db.query(UserSession).one()
        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        with pytest.raises(UnauthorizedError, match="token has expired"):
            refresh_session(db, token)
        assert db.query(UserSession).count() == 0

    def test_revoke(self, db, make_user):
        token = issue_refresh_token(db, make_user("alice"))
        assert revoke_refresh_token(db, token) is True
        assert revoke_refresh_token(db, token) is False
        with pytest.raises(UnauthorizedError):
            refresh_session(db, token)


class TestPasswordAndUsername:
    def test_change_password_revokes_sessions(self, db, make_user):
        user = make_user("alice")
        token = issue_refresh_token(db, user)

        change_password(db, user.id, TEST_PASSWORD, TEST_PASSWORD_WRONG)

        assert authenticate_user(db, "alice", TEST_PASSWORD_WRONG) is not None
        assert authenticate_user(db, "alice", TEST_PASSWORD) is None
        with pytest.raises(UnauthorizedError):
            refresh_session(db, token)

    def test_change_password_needs_current(self, db, make_user):
        user = make_user("alice")
        with pytest.raises(ValidationFailedError, match="current password is incorrect"):
            change_password(db, user.id, TEST_PASSWORD_WRONG, "another-password")
        assert authenticate_user(db, "alice", TEST_PASSWORD) is not None

    def test_change_password_must_differ(self, db, make_user):
        user = make_user("alice")
        with pytest.raises(ValidationFailedError, match="must differ"):
            change_password(db, user.id, TEST_PASSWORD, TEST_PASSWORD)

    def test_username_availability(self, db, make_user):
        user = make_user("alice")
        assert is_username_available(db, "alice") is False
        assert is_username_available(db, "bob") is True

        user.mark_deleted()
        db.commit()
        assert is_username_available(db, "alice") is False


class TestAuthAPI:
    def test_register(self, client_with_db: TestClient):
        response = client_with_db.post(
            "/api/auth/register",
            json={"username": "newbie", "email": "Newbie@Example.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "newbie@example.com"
        assert data["is_super_admin"] is False
        assert "password_hash" not in data

    def test_register_duplicate_is_conflict(self, client_with_db: TestClient, make_user):
        make_user("alice")
        response = client_with_db.post(
            "/api/auth/register",
            json={"username": "alice", "email": "x@example.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "username already taken",
            "error": "CONFLICT",
        }

    def test_login_sets_cookie(self, client_with_db: TestClient, make_user):
        user = make_user("alice")
        response = client_with_db.post(
            "/api/auth/login", json={"username": "alice@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        token = response.json()["data"]["access_token"]
        assert decode_claims(token).user_id == user.id
        assert response.cookies.get("access_token") == token

    def test_login_wrong_password(self, client_with_db: TestClient, make_user):
        make_user("alice")
        response = client_with_db.post(
            "/api/auth/login", json={"username": "alice", "password": TEST_PASSWORD_WRONG}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHORIZED"

    def test_me(self, client_with_db: TestClient, make_user):
        user = make_user("alice", first_name="Alice", last_name="Liddell")
        response = client_with_db.get("/api/users/me", headers=auth_headers(user))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "alice"
        assert data["name"] == "Alice Liddell"

    def test_me_requires_auth(self, client_with_db: TestClient):
        response = client_with_db.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authenticated"

    def test_malformed_authorization_header(self, client_with_db: TestClient):
        response = client_with_db.get("/api/users/me", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.json()["message"] == "invalid token format, expected 'Bearer <token>'"

    def test_cookie_auth(self, client_with_db: TestClient, make_user):
        user = make_user("alice")
        client_with_db.cookies.set("access_token", create_user_token(user))
        response = client_with_db.get("/api/users/me")
        assert response.status_code == 200

    def test_invalid_bearer_token(self, client_with_db: TestClient):
        response = client_with_db.get(
            "/api/users/me", headers={"Authorization": f"Bearer {TEST_ACCESS_TOKEN_PLACEHOLDER}"}
        )
        assert response.status_code == 401

    def test_login_refresh_logout_flow(self, client_with_db: TestClient, make_user):
        make_user("alice")
        login = client_with_db.post(
            "/api/auth/login", json={"username": "alice", "password": TEST_PASSWORD}
        ).json()["data"]
        assert login["refresh_token"]

        refreshed = client_with_db.post(
            "/api/auth/refresh", json={"refresh_token": login["refresh_token"]}
        )
        assert refreshed.status_code == 200
        new_refresh = refreshed.json()["data"]["refresh_token"]
        assert new_refresh != login["refresh_token"]

        reused = client_with_db.post(
            "/api/auth/refresh", json={"refresh_token": login["refresh_token"]}
        )
        assert reused.status_code == 401
        assert reused.json()["error"] == "UNAUTHORIZED"

        logout = client_with_db.post("/api/auth/logout", json={"refresh_token": new_refresh})
        assert logout.status_code == 200
        after_logout = client_with_db.post(
            "/api/auth/refresh", json={"refresh_token": new_refresh}
        )
        assert after_logout.status_code == 401

    def test_logout_without_body(self, client_with_db: TestClient):
        response = client_with_db.post("/api/auth/logout")
        assert response.status_code == 200

    def test_change_password(self, client_with_db: TestClient, make_user):
        user = make_user("alice")
        headers = auth_headers(user)

        wrong = client_with_db.put(
            "/api/auth/change-password",
            json={"current_password": TEST_PASSWORD_WRONG, "new_password": "brand-new-pw"},
            headers=headers,
        )
        assert wrong.status_code == 400

        changed = client_with_db.put(
            "/api/auth/change-password",
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new-pw"},
            headers=headers,
        )
        assert changed.status_code == 200

        login = client_with_db.post(
            "/api/auth/login", json={"username": "alice", "password": "brand-new-pw"}
        )
        assert login.status_code == 200

    def test_change_password_requires_auth(self, client_with_db: TestClient):
        response = client_with_db.put(
            "/api/auth/change-password",
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new-pw"},
        )
        assert response.status_code == 401

    def test_check_username(self, client_with_db: TestClient, make_user):
        make_user("alice")
        taken = client_with_db.post("/api/auth/check-username", json={"username": "alice"})
        free = client_with_db.post("/api/auth/check-username", json={"username": "bobby"})

        assert taken.json()["data"] == {"username": "alice", "available": False}
        assert free.json()["data"] == {"username": "bobby", "available": True}

    def test_expired_bearer_token(self, client_with_db: TestClient, make_user):
        token = create_user_token(make_user("alice"), expires_delta=timedelta(seconds=-1))
        response = client_with_db.get(
            "/api/users/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "invalid or expired token"
