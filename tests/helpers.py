"""Shared helpers for building authenticated requests and claims."""

from __future__ import annotations

from inkwell.models import User
from inkwell.services.auth import TokenClaims, create_user_token


def auth_headers(user: User) -> dict[str, str]:
    """Authorization header carrying a freshly minted token for ``user``."""
    return {"Authorization": f"Bearer {create_user_token(user)}"}


def claims_for(user: User) -> TokenClaims:
    """TokenClaims as the auth boundary would build them for ``user``."""
    return TokenClaims(user_id=user.id, is_super_admin=bool(user.is_super_admin))
