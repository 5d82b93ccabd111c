"""Follow service: validates follow-graph rules before touching the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from inkwell.models import User, UserFollow
from inkwell.repositories.follow import FollowRepository
from inkwell.repositories.user import UserRepository
from inkwell.services.errors import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


@dataclass
class FollowStats:
    user_id: int
    followers_count: int
    following_count: int


class FollowService:
    def __init__(self, follows: FollowRepository, users: UserRepository) -> None:
        self.follows = follows
        self.users = users

    def _require_user(self, user_id: int, message: str = "user not found") -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError(message)
        return user

    def follow(self, follower_id: int, following_id: int) -> UserFollow:
        """Create the edge and bump both counters. Self-follow is always rejected."""
        if follower_id == following_id:
            raise SelfFollowError()
        self._require_user(follower_id, "follower user not found")
        self._require_user(following_id, "user to follow not found")
        if self.follows.is_following(follower_id, following_id):
            raise AlreadyFollowingError()
        edge = self.follows.follow(follower_id, following_id)
        logger.info("User followed: follower_id=%s following_id=%s", follower_id, following_id)
        return edge

    def unfollow(self, follower_id: int, following_id: int) -> None:
        if follower_id == following_id:
            raise NotFollowingError()
        self.follows.unfollow(follower_id, following_id)
        logger.info("User unfollowed: follower_id=%s following_id=%s", follower_id, following_id)

    def is_following(self, follower_id: int, following_id: int) -> bool:
        return self.follows.is_following(follower_id, following_id)

    def get_followers(self, user_id: int, page: Pagination) -> tuple[list[User], int]:
        self._require_user(user_id)
        return self.follows.get_followers(user_id, page)

    def get_following(self, user_id: int, page: Pagination) -> tuple[list[User], int]:
        self._require_user(user_id)
        return self.follows.get_following(user_id, page)

    def get_follow_stats(self, user_id: int) -> FollowStats:
        """Counts taken from the edge table, not the denormalized columns."""
        self._require_user(user_id)
        return FollowStats(
            user_id=user_id,
            followers_count=self.follows.count_followers(user_id),
            following_count=self.follows.count_following(user_id),
        )

    def update_follow_counts(self, user_id: int) -> FollowStats:
        self._require_user(user_id)
        followers, following = self.follows.update_follow_counts(user_id)
        return FollowStats(user_id=user_id, followers_count=followers, following_count=following)

    def get_mutual_follows(self, user_a: int, user_b: int) -> list[User]:
        self._require_user(user_a)
        self._require_user(user_b)
        return self.follows.get_mutual_follows(user_a, user_b)

    def get_user_with_follow_status(
        self, target_id: int, viewer_id: int | None
    ) -> tuple[User, bool]:
        """Return the target user and whether ``viewer_id`` follows them."""
        user = self._require_user(target_id)
        if viewer_id is None or viewer_id == target_id:
            return user, False
        return user, self.follows.is_following(viewer_id, target_id)
