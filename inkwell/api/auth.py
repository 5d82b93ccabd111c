"""Authentication API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from inkwell.api.deps import AUTH_COOKIE, get_db, require_auth
from inkwell.api.responses import ok
from inkwell.config import get_settings
from inkwell.schemas.auth import (
    ChangePasswordRequest,
    CheckUsernameRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UsernameAvailability,
)
from inkwell.schemas.common import APIResponse
from inkwell.schemas.user import UserMe
from inkwell.services.auth import (
    TokenClaims,
    authenticate_user,
    change_password,
    create_user,
    create_user_token,
    is_username_available,
    issue_refresh_token,
    refresh_session,
    revoke_refresh_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * get_settings().access_token_expire_hours,
        path="/",
    )


@router.post("/register", response_model=APIResponse[UserMe], status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)) -> APIResponse:
    """Create an account. Username and email must be unused."""
    user = create_user(
        db,
        username=body.username,
        email=body.email.lower(),
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return ok("User registered successfully", UserMe.model_validate(user))


@router.post("/login", response_model=APIResponse[TokenResponse])
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> APIResponse:
    """Authenticate user and return a JWT access token plus a refresh token.

    Also sets an httponly cookie for browser sessions.
    """
    user = authenticate_user(db, body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_user_token(user)
    refresh_token = issue_refresh_token(db, user)
    _set_auth_cookie(response, token)
    logger.info("User logged in: user_id=%s", user.id)

    return ok("Login successful", TokenResponse(access_token=token, refresh_token=refresh_token))


@router.post("/refresh", response_model=APIResponse[TokenResponse])
def refresh(
    body: RefreshRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> APIResponse:
    """Trade a refresh token for a new access token. The refresh token is rotated."""
    token, refresh_token, _user = refresh_session(db, body.refresh_token)
    _set_auth_cookie(response, token)
    return ok(
        "Token refreshed successfully",
        TokenResponse(access_token=token, refresh_token=refresh_token),
    )


@router.post("/logout", response_model=APIResponse[None])
def logout(
    response: Response,
    body: RefreshRequest | None = None,
    db: Session = Depends(get_db),
) -> APIResponse:
    """Clear the authentication cookie and end the refresh session, if one is given."""
    if body is not None:
        revoke_refresh_token(db, body.refresh_token)
    response.delete_cookie(key=AUTH_COOKIE, path="/")
    return ok("Logged out")


@router.post("/check-username", response_model=APIResponse[UsernameAvailability])
def check_username(body: CheckUsernameRequest, db: Session = Depends(get_db)) -> APIResponse:
    available = is_username_available(db, body.username)
    return ok(
        "Username availability checked",
        UsernameAvailability(username=body.username, available=available),
    )


@router.put("/change-password", response_model=APIResponse[None])
def update_password(
    body: ChangePasswordRequest,
    claims: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db),
) -> APIResponse:
    """Change the caller's password. Existing refresh tokens stop working."""
    change_password(db, claims.user_id, body.current_password, body.new_password)
    return ok("Password changed successfully")
