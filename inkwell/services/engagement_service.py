"""Like and view services for posts."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from inkwell.models import PostLike, PostView
from inkwell.repositories.like import LikeRepository
from inkwell.repositories.post import PostRepository
from inkwell.repositories.view import ViewRepository, ViewStats
from inkwell.services.errors import AlreadyLikedError, PostNotFoundError
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


@dataclass
class LikeStats:
    post_id: uuid.UUID
    total_likes: int


class LikeService:
    def __init__(self, likes: LikeRepository, posts: PostRepository) -> None:
        self.likes = likes
        self.posts = posts

    def _require_post(self, post_id: uuid.UUID) -> None:
        if not self.posts.exists(post_id):
            raise PostNotFoundError()

    def like_post(self, post_id: uuid.UUID, user_id: int) -> PostLike:
        """Like a post. A second like by the same user raises AlreadyLikedError."""
        self._require_post(post_id)
        if self.likes.has_liked(post_id, user_id):
            raise AlreadyLikedError()
        return self.likes.create(post_id, user_id)

    def unlike_post(self, post_id: uuid.UUID, user_id: int) -> None:
        """Remove a like. Raises NotLikedError when the user never liked the post."""
        self._require_post(post_id)
        self.likes.delete(post_id, user_id)

    def get_likes(self, post_id: uuid.UUID, page: Pagination) -> tuple[list[PostLike], int]:
        self._require_post(post_id)
        return self.likes.list_by_post(post_id, page)

    def get_like_stats(self, post_id: uuid.UUID) -> LikeStats:
        self._require_post(post_id)
        return LikeStats(post_id=post_id, total_likes=self.likes.count_by_post(post_id))

    def has_user_liked(self, post_id: uuid.UUID, user_id: int) -> bool:
        self._require_post(post_id)
        return self.likes.has_liked(post_id, user_id)


class ViewService:
    def __init__(self, views: ViewRepository, posts: PostRepository) -> None:
        self.views = views
        self.posts = posts

    def _require_post(self, post_id: uuid.UUID) -> None:
        if not self.posts.exists(post_id):
            raise PostNotFoundError()

    def record_view(
        self,
        post_id: uuid.UUID,
        user_id: int | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PostView | None:
        """Record a view and bump the post's view_count.

        Authenticated users are counted once per post: a repeat view returns
        None without writing. Anonymous views are always recorded.
        """
        self._require_post(post_id)
        if user_id is not None and self.views.has_viewed(post_id, user_id):
            return None
        view = PostView(post_id=post_id, user_id=user_id)
        if ip_address:
            view.ip_address = ip_address[:45]
        if user_agent:
            view.user_agent = user_agent
        return self.views.record(view)

    def get_views(
        self, post_id: uuid.UUID, offset: int | None = None, limit: int | None = None
    ) -> tuple[list[PostView], int, Pagination]:
        """Views newest first, limit defaulting to 10 and capped at 100."""
        self._require_post(post_id)
        page = Pagination.clamped(offset, limit)
        views, total = self.views.list_by_post(post_id, page)
        return views, total, page

    def get_view_stats(self, post_id: uuid.UUID) -> ViewStats:
        self._require_post(post_id)
        return self.views.stats(post_id)

    def has_user_viewed(self, post_id: uuid.UUID, user_id: int | None) -> bool:
        if user_id is None:
            return False
        self._require_post(post_id)
        return self.views.has_viewed(post_id, user_id)
