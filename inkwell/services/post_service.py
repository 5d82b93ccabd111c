"""Post service: authoring, tagging and photo attachment."""

from __future__ import annotations

import logging
import os
import re
import uuid
from collections.abc import Iterable
from typing import Any, BinaryIO

from inkwell.models import Post
from inkwell.repositories.post import PostRepository
from inkwell.repositories.tag import TagRepository
from inkwell.services.auth import TokenClaims
from inkwell.services.errors import ForbiddenError, PostNotFoundError, ValidationFailedError
from inkwell.services.pagination import Pagination
from inkwell.services.tag_service import normalize_tag_name
from inkwell.storage.base import ObjectStorage

logger = logging.getLogger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
MAX_SLUG_LENGTH = 200
ALLOWED_PHOTO_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
RANDOM_DEFAULT_LIMIT = 9
RANDOM_MAX_LIMIT = 20


def slugify(title: str) -> str:
    """Lowercase ASCII slug: runs of other characters collapse to one hyphen."""
    slug = _SLUG_INVALID.sub("-", title.lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-") or "post"


def ensure_author(post: Post, claims: TokenClaims) -> None:
    if post.created_by != claims.user_id and not claims.is_super_admin:
        raise ForbiddenError("only the author can modify this post")


class PostService:
    def __init__(self, posts: PostRepository, tags: TagRepository) -> None:
        self.posts = posts
        self.tags = tags

    def _unique_slug(self, title: str) -> str:
        slug = slugify(title)
        if self.posts.slug_taken(slug):
            slug = f"{slug[: MAX_SLUG_LENGTH - 9]}-{uuid.uuid4().hex[:8]}"
        return slug

    def create_post(
        self,
        author_id: int,
        title: str,
        body: str,
        tag_names: Iterable[str] = (),
    ) -> Post:
        title = (title or "").strip()
        if not title:
            raise ValidationFailedError("post title is required")
        post = Post(
            title=title,
            body=body or "",
            slug=self._unique_slug(title),
            created_by=author_id,
        )
        post.tags = self.tags.get_or_create(tag_names)
        post = self.posts.create(post)
        logger.info("Post created: id=%s author_id=%s", post.id, author_id)
        return post

    def get_post(self, post_id: uuid.UUID) -> Post:
        post = self.posts.get(post_id)
        if post is None:
            raise PostNotFoundError()
        return post

    def get_post_by_slug(self, slug: str) -> Post:
        post = self.posts.get_by_slug(slug)
        if post is None:
            raise PostNotFoundError()
        return post

    def list_posts(
        self, page: Pagination, author_id: int | None = None
    ) -> tuple[list[Post], int]:
        return self.posts.list(page, author_id=author_id)

    def list_posts_by_tag(self, tag: str, page: Pagination) -> tuple[list[Post], int]:
        return self.posts.list_by_tag(normalize_tag_name(tag), page)

    def list_posts_by_username(self, username: str, page: Pagination) -> tuple[list[Post], int]:
        return self.posts.list_by_username(username, page)

    def get_post_by_author_slug(self, username: str, slug: str) -> Post:
        post = self.posts.get_by_author_and_slug(username, slug)
        if post is None:
            raise PostNotFoundError()
        return post

    def random_posts(self, limit: int = RANDOM_DEFAULT_LIMIT) -> list[Post]:
        """A random sample of live posts. Non-positive limits fall back to the default."""
        if limit <= 0:
            limit = RANDOM_DEFAULT_LIMIT
        return self.posts.random(min(limit, RANDOM_MAX_LIMIT))

    def update_post(
        self, post_id: uuid.UUID, claims: TokenClaims, changes: dict[str, Any]
    ) -> Post:
        post = self.get_post(post_id)
        ensure_author(post, claims)
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValidationFailedError("post title is required")
            if title != post.title:
                post.title = title
                post.slug = self._unique_slug(title)
        if changes.get("body") is not None:
            post.body = changes["body"]
        if changes.get("tags") is not None:
            post.tags = self.tags.get_or_create(changes["tags"])
        return self.posts.save(post)

    def delete_post(self, post_id: uuid.UUID, claims: TokenClaims) -> None:
        post = self.get_post(post_id)
        ensure_author(post, claims)
        self.posts.soft_delete(post_id)
        logger.info("Post soft-deleted: id=%s by user_id=%s", post_id, claims.user_id)

    def set_photo(
        self,
        post_id: uuid.UUID,
        claims: TokenClaims,
        storage: ObjectStorage,
        filename: str,
        stream: BinaryIO,
        content_type: str | None,
    ) -> tuple[Post, str | None]:
        """Upload a photo for the post.

        Returns the updated post and the storage key of the replaced photo,
        if any, so the caller can delete it.
        """
        post = self.get_post(post_id)
        ensure_author(post, claims)
        if content_type not in ALLOWED_PHOTO_TYPES:
            raise ValidationFailedError("photo must be a JPEG, PNG, GIF or WebP image")
        ext = os.path.splitext(filename or "")[1].lower()[:10]
        key = f"posts/{post.id}/{uuid.uuid4().hex}{ext}"
        url = storage.save(key, stream, content_type)
        old_key = post.photo_key
        post.photo_url = url
        post.photo_key = key
        post = self.posts.save(post)
        logger.info("Post photo stored: id=%s key=%s", post.id, key)
        return post, old_key
