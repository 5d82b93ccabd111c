"""Authentication service: registration, credentials, JWT access tokens and refresh sessions."""

from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from inkwell.config import get_settings
from inkwell.models.user import User
from inkwell.repositories.session import SessionRepository
from inkwell.repositories.user import UserRepository
from inkwell.services.errors import (
    UnauthorizedError,
    UserExistsError,
    UserNotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"
REFRESH_TOKEN_PREFIX = "rt_"


@dataclass(frozen=True)
class TokenClaims:
    """Identity fields read from a verified access token."""

    user_id: int
    is_super_admin: bool = False


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    is_super_admin: bool = False,
) -> User:
    """Create a new user with hashed password.

    Raises UserExistsError if the username or email is already registered.
    """
    users = UserRepository(db)
    if users.get_by_username(username) is not None:
        raise UserExistsError("username already taken")
    if users.get_by_email(email) is not None:
        raise UserExistsError("email already registered")
    user = User(
        username=username,
        email=email,
        first_name=first_name,
        last_name=last_name,
        is_super_admin=is_super_admin,
    )
    user.set_password(password)
    return users.create(user)


def authenticate_user(db: Session, login: str, password: str) -> Optional[User]:
    """Validate credentials (username or email) and return user, or None if invalid."""
    user = UserRepository(db).get_by_login(login)
    if user is None:
        return None
    if not user.verify_password(password):
        return None
    return user


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.access_token_expire_hours)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_user_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue an access token carrying the user's identity claims."""
    return create_access_token(
        data={
            "sub": str(user.id),
            "user_id": user.id,
            "is_super_admin": bool(user.is_super_admin),
        },
        expires_delta=expires_delta,
    )


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token. Returns payload or None."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None


def claims_from_payload(payload: dict[str, Any]) -> Optional[TokenClaims]:
    """Build typed claims from a decoded payload. Returns None if user_id is missing or malformed."""
    raw_user_id = payload.get("user_id", payload.get("sub"))
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError):
        return None
    raw_admin = payload.get("is_super_admin", False)
    # Older tokens carry the flag as a string.
    is_super_admin = raw_admin is True or (
        isinstance(raw_admin, str) and raw_admin.lower() == "true"
    )
    return TokenClaims(user_id=user_id, is_super_admin=is_super_admin)


def decode_claims(token: str) -> Optional[TokenClaims]:
    """Decode a token straight to TokenClaims. Returns None if invalid."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    return claims_from_payload(payload)


def is_username_available(db: Session, username: str) -> bool:
    """Usernames of deleted accounts stay reserved."""
    return not UserRepository(db).username_taken(username)


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    """Replace the user's password and revoke all of their refresh sessions."""
    users = UserRepository(db)
    user = users.get(user_id)
    if user is None:
        raise UserNotFoundError()
    if not user.verify_password(current_password):
        raise ValidationFailedError("current password is incorrect")
    if current_password == new_password:
        raise ValidationFailedError("new password must differ from the current password")
    user.set_password(new_password)
    users.commit()
    revoked = SessionRepository(db).delete_for_user(user_id)
    logger.info("Password changed: user_id=%s sessions_revoked=%s", user_id, revoked)


# Refresh tokens
#
# Refresh tokens are opaque random strings. Only their SHA-256 digest is
# persisted, and every use rotates the token.


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _new_refresh_token() -> tuple[str, datetime]:
    token = REFRESH_TOKEN_PREFIX + secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(
        days=get_settings().refresh_token_expire_days
    )
    return token, expires_at


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def issue_refresh_token(db: Session, user: User) -> str:
    """Open a session for ``user`` and return its refresh token."""
    token, expires_at = _new_refresh_token()
    SessionRepository(db).create(user.id, hash_refresh_token(token), expires_at)
    return token


def refresh_session(db: Session, refresh_token: str) -> tuple[str, str, User]:
    """Exchange a refresh token for a new access token and a rotated refresh token.

    Raises UnauthorizedError for unknown, expired or orphaned sessions. An
    expired session is removed.
    """
    sessions = SessionRepository(db)
    session = sessions.get_by_token_hash(hash_refresh_token(refresh_token))
    if session is None:
        raise UnauthorizedError("invalid or expired token")
    if _as_utc(session.expires_at) <= datetime.now(timezone.utc):
        sessions.delete(session)
        raise UnauthorizedError("token has expired")
    user = UserRepository(db).get(session.user_id)
    if user is None:
        sessions.delete(session)
        raise UnauthorizedError("invalid or expired token")
    new_token, expires_at = _new_refresh_token()
    sessions.rotate(session, hash_refresh_token(new_token), expires_at)
    return create_user_token(user), new_token, user


def revoke_refresh_token(db: Session, refresh_token: str) -> bool:
    """End the session holding ``refresh_token``. False when it was unknown."""
    return SessionRepository(db).delete_by_token_hash(hash_refresh_token(refresh_token))
