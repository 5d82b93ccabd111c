"""Shared FastAPI dependencies for API routes.

Authentication decodes the bearer token once into TokenClaims; handlers only
ever see the typed claims. Services are built per request around the
request's Session.
"""

from __future__ import annotations

from fastapi import Cookie, Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from inkwell.db.session import get_db  # re-export
from inkwell.repositories import (
    BlockRepository,
    ChatRepository,
    CommentRepository,
    FollowRepository,
    LikeRepository,
    PageRepository,
    PostRepository,
    SessionRepository,
    TagRepository,
    UserRepository,
    ViewRepository,
    WorkspaceRepository,
)
from inkwell.services.auth import TokenClaims, decode_claims
from inkwell.services.chat_service import ChatService
from inkwell.services.comment_service import CommentService
from inkwell.services.engagement_service import LikeService, ViewService
from inkwell.services.follow_service import FollowService
from inkwell.services.page_service import BlockService, PageService
from inkwell.services.pagination import DEFAULT_LIMIT, MAX_LIMIT, Pagination
from inkwell.services.post_service import PostService
from inkwell.services.tag_service import TagService
from inkwell.services.user_service import UserService
from inkwell.services.workspace_service import WorkspaceService
from inkwell.storage import ObjectStorage, get_storage
from inkwell.worker import WorkerPool

__all__ = [
    "AUTH_COOKIE",
    "get_db",
    "get_current_claims",
    "get_pagination",
    "require_admin",
    "require_auth",
]

# Cookie name for browser sessions
AUTH_COOKIE = "access_token"
BEARER_PREFIX = "Bearer "


def get_current_claims(
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None),
) -> TokenClaims | None:
    """Return the caller's claims, or None for anonymous requests.

    Checks (in order):
    1. Authorization: Bearer <token> header
    2. access_token cookie

    An Authorization header in any other format is rejected with 401, as is
    a token that is present but fails to decode or has expired.
    """
    token: str | None = None

    if authorization:
        if not authorization.startswith(BEARER_PREFIX):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="invalid token format, expected 'Bearer <token>'",
            )
        token = authorization[len(BEARER_PREFIX) :].strip()

    # Fall back to cookie
    if not token and access_token:
        token = access_token

    if not token:
        return None

    claims = decode_claims(token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired token",
        )
    return claims


def require_auth(claims: TokenClaims | None = Depends(get_current_claims)) -> TokenClaims:
    """Dependency that requires a valid access token."""
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return claims


def require_admin(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
    """Dependency that requires a super admin token."""
    if not claims.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="forbidden: insufficient privileges",
        )
    return claims


def get_pagination(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> Pagination:
    return Pagination.from_page(page, limit)


def get_worker_pool(request: Request) -> WorkerPool | None:
    """The app's background pool; None when the lifespan has not started it."""
    return getattr(request.app.state, "worker_pool", None)


def get_object_storage() -> ObjectStorage:
    return get_storage()


# Service providers


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db), SessionRepository(db))


def get_workspace_service(db: Session = Depends(get_db)) -> WorkspaceService:
    return WorkspaceService(WorkspaceRepository(db), UserRepository(db))


def get_page_service(db: Session = Depends(get_db)) -> PageService:
    return PageService(PageRepository(db), WorkspaceRepository(db))


def get_block_service(db: Session = Depends(get_db)) -> BlockService:
    return BlockService(BlockRepository(db), PageRepository(db))


def get_follow_service(db: Session = Depends(get_db)) -> FollowService:
    return FollowService(FollowRepository(db), UserRepository(db))


def get_post_service(db: Session = Depends(get_db)) -> PostService:
    return PostService(PostRepository(db), TagRepository(db))


def get_like_service(db: Session = Depends(get_db)) -> LikeService:
    return LikeService(LikeRepository(db), PostRepository(db))


def get_view_service(db: Session = Depends(get_db)) -> ViewService:
    return ViewService(ViewRepository(db), PostRepository(db))


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    return CommentService(CommentRepository(db), PostRepository(db))


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    return TagService(TagRepository(db))


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(ChatRepository(db))
