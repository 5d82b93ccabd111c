"""Post routes: CRUD, lookups, photo upload, likes, views and comments."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict

from fastapi import APIRouter, Depends, File, Header, Query, Request, UploadFile

from inkwell.api.deps import (
    get_comment_service,
    get_current_claims,
    get_like_service,
    get_object_storage,
    get_pagination,
    get_post_service,
    get_view_service,
    get_worker_pool,
    require_auth,
)
from inkwell.api.responses import ok, paginated
from inkwell.schemas.common import APIResponse
from inkwell.schemas.post import (
    CommentCreate,
    CommentRead,
    LikedStatus,
    LikeRead,
    LikeStatsRead,
    PostCreate,
    PostRead,
    PostUpdate,
    ViewedStatus,
    ViewRead,
    ViewStatsRead,
)
from inkwell.services.auth import TokenClaims
from inkwell.services.comment_service import CommentService
from inkwell.services.engagement_service import LikeService, ViewService
from inkwell.services.pagination import DEFAULT_LIMIT, Pagination
from inkwell.services.post_service import RANDOM_DEFAULT_LIMIT, PostService
from inkwell.storage import ObjectStorage
from inkwell.worker import WorkerPool

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=APIResponse[PostRead], status_code=201)
def create_post(
    body: PostCreate,
    claims: TokenClaims = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    post = posts.create_post(claims.user_id, body.title, body.body, body.tags)
    return ok("Post created successfully", PostRead.model_validate(post))


@router.get("", response_model=APIResponse[list[PostRead]])
def list_posts(
    author_id: int | None = Query(None, gt=0),
    page: Pagination = Depends(get_pagination),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    items, total = posts.list_posts(page, author_id=author_id)
    return paginated(
        "Posts retrieved successfully", [PostRead.model_validate(p) for p in items], total, page
    )


@router.get("/slug/{slug}", response_model=APIResponse[PostRead])
def get_post_by_slug(slug: str, posts: PostService = Depends(get_post_service)) -> APIResponse:
    return ok("Post retrieved successfully", PostRead.model_validate(posts.get_post_by_slug(slug)))


@router.get("/mine", response_model=APIResponse[list[PostRead]])
def list_my_posts(
    page: Pagination = Depends(get_pagination),
    claims: TokenClaims = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    items, total = posts.list_posts(page, author_id=claims.user_id)
    return paginated(
        "Posts retrieved successfully", [PostRead.model_validate(p) for p in items], total, page
    )


@router.get("/random", response_model=APIResponse[list[PostRead]])
def random_posts(
    limit: int = Query(RANDOM_DEFAULT_LIMIT),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    """Random live posts. ``limit`` is capped rather than rejected."""
    items = posts.random_posts(limit)
    return ok("Posts retrieved successfully", [PostRead.model_validate(p) for p in items])


@router.get("/tag/{tag}", response_model=APIResponse[list[PostRead]])
def list_posts_by_tag(
    tag: str,
    page: Pagination = Depends(get_pagination),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    items, total = posts.list_posts_by_tag(tag, page)
    return paginated(
        "Posts retrieved successfully", [PostRead.model_validate(p) for p in items], total, page
    )


@router.get("/username/{username}", response_model=APIResponse[list[PostRead]])
def list_posts_by_username(
    username: str,
    page: Pagination = Depends(get_pagination),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    items, total = posts.list_posts_by_username(username, page)
    return paginated(
        "Posts retrieved successfully", [PostRead.model_validate(p) for p in items], total, page
    )


@router.get("/u/{username}/{slug}", response_model=APIResponse[PostRead])
def get_post_by_author_slug(
    username: str, slug: str, posts: PostService = Depends(get_post_service)
) -> APIResponse:
    post = posts.get_post_by_author_slug(username, slug)
    return ok("Post retrieved successfully", PostRead.model_validate(post))


@router.get("/{post_id}", response_model=APIResponse[PostRead])
def get_post(post_id: uuid.UUID, posts: PostService = Depends(get_post_service)) -> APIResponse:
    return ok("Post retrieved successfully", PostRead.model_validate(posts.get_post(post_id)))


@router.put("/{post_id}", response_model=APIResponse[PostRead])
def update_post(
    post_id: uuid.UUID,
    body: PostUpdate,
    claims: TokenClaims = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    post = posts.update_post(post_id, claims, body.model_dump(exclude_unset=True))
    return ok("Post updated successfully", PostRead.model_validate(post))


@router.delete("/{post_id}", response_model=APIResponse[None])
def delete_post(
    post_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
) -> APIResponse:
    posts.delete_post(post_id, claims)
    return ok("Post deleted successfully")


@router.post("/{post_id}/photo", response_model=APIResponse[PostRead])
def upload_photo(
    post_id: uuid.UUID,
    photo: UploadFile = File(...),
    claims: TokenClaims = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
    storage: ObjectStorage = Depends(get_object_storage),
    pool: WorkerPool | None = Depends(get_worker_pool),
) -> APIResponse:
    """Attach a photo. The replaced photo, if any, is deleted in the background."""
    post, old_key = posts.set_photo(
        post_id,
        claims,
        storage,
        photo.filename or "",
        photo.file,
        photo.content_type,
    )
    if old_key:

        async def _delete_old_photo() -> None:
            await asyncio.to_thread(storage.delete, old_key)

        if pool is None or not pool.submit_threadsafe(_delete_old_photo):
            logger.warning("Old photo left in storage: key=%s", old_key)
    return ok("Photo uploaded successfully", PostRead.model_validate(post))


# Likes


@router.post("/{post_id}/like", response_model=APIResponse[LikeRead], status_code=201)
def like_post(
    post_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    likes: LikeService = Depends(get_like_service),
) -> APIResponse:
    like = likes.like_post(post_id, claims.user_id)
    return ok("Post liked successfully", LikeRead.model_validate(like))


@router.delete("/{post_id}/like", response_model=APIResponse[None])
def unlike_post(
    post_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    likes: LikeService = Depends(get_like_service),
) -> APIResponse:
    likes.unlike_post(post_id, claims.user_id)
    return ok("Post unliked successfully")


@router.get("/{post_id}/likes", response_model=APIResponse[list[LikeRead]])
def list_likes(
    post_id: uuid.UUID,
    page: Pagination = Depends(get_pagination),
    likes: LikeService = Depends(get_like_service),
) -> APIResponse:
    items, total = likes.get_likes(post_id, page)
    return paginated(
        "Likes retrieved successfully", [LikeRead.model_validate(i) for i in items], total, page
    )


@router.get("/{post_id}/like-stats", response_model=APIResponse[LikeStatsRead])
def like_stats(post_id: uuid.UUID, likes: LikeService = Depends(get_like_service)) -> APIResponse:
    stats = likes.get_like_stats(post_id)
    return ok("Like stats retrieved successfully", LikeStatsRead.model_validate(stats))


@router.get("/{post_id}/liked", response_model=APIResponse[LikedStatus])
def has_liked(
    post_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    likes: LikeService = Depends(get_like_service),
) -> APIResponse:
    liked = likes.has_user_liked(post_id, claims.user_id)
    return ok("Like status retrieved successfully", LikedStatus(post_id=post_id, liked=liked))


# Views


@router.post("/{post_id}/view", response_model=APIResponse[ViewRead | None])
def record_view(
    post_id: uuid.UUID,
    request: Request,
    user_agent: str | None = Header(None),
    claims: TokenClaims | None = Depends(get_current_claims),
    views: ViewService = Depends(get_view_service),
) -> APIResponse:
    """Record a view. Anonymous callers are allowed; a repeat authenticated view is a no-op."""
    view = views.record_view(
        post_id,
        user_id=claims.user_id if claims else None,
        ip_address=request.client.host if request.client else None,
        user_agent=user_agent,
    )
    if view is None:
        return ok("View already recorded")
    return ok("View recorded successfully", ViewRead.model_validate(view))


@router.get("/{post_id}/views", response_model=APIResponse[list[ViewRead]])
def list_views(
    post_id: uuid.UUID,
    offset: int = Query(0),
    limit: int = Query(DEFAULT_LIMIT),
    views: ViewService = Depends(get_view_service),
    _auth: TokenClaims = Depends(require_auth),
) -> APIResponse:
    """Views newest first. Out-of-range offset/limit values are clamped, not rejected."""
    items, total, page = views.get_views(post_id, offset=offset, limit=limit)
    return paginated(
        "Views retrieved successfully", [ViewRead.model_validate(v) for v in items], total, page
    )


@router.get("/{post_id}/view-stats", response_model=APIResponse[ViewStatsRead])
def view_stats(post_id: uuid.UUID, views: ViewService = Depends(get_view_service)) -> APIResponse:
    stats = views.get_view_stats(post_id)
    return ok(
        "View stats retrieved successfully", ViewStatsRead(post_id=post_id, **asdict(stats))
    )


@router.get("/{post_id}/viewed", response_model=APIResponse[ViewedStatus])
def has_viewed(
    post_id: uuid.UUID,
    claims: TokenClaims | None = Depends(get_current_claims),
    views: ViewService = Depends(get_view_service),
) -> APIResponse:
    viewed = views.has_user_viewed(post_id, claims.user_id if claims else None)
    return ok("View status retrieved successfully", ViewedStatus(post_id=post_id, viewed=viewed))


# Comments


@router.post("/{post_id}/comments", response_model=APIResponse[CommentRead], status_code=201)
def create_comment(
    post_id: uuid.UUID,
    body: CommentCreate,
    claims: TokenClaims = Depends(require_auth),
    comments: CommentService = Depends(get_comment_service),
) -> APIResponse:
    comment = comments.create_comment(post_id, claims.user_id, body.content)
    return ok("Comment created successfully", CommentRead.model_validate(comment))


@router.get("/{post_id}/comments", response_model=APIResponse[list[CommentRead]])
def list_comments(
    post_id: uuid.UUID,
    page: Pagination = Depends(get_pagination),
    comments: CommentService = Depends(get_comment_service),
) -> APIResponse:
    items, total = comments.list_comments(post_id, page)
    return paginated(
        "Comments retrieved successfully",
        [CommentRead.model_validate(c) for c in items],
        total,
        page,
    )
