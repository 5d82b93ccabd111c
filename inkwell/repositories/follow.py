"""Follow-graph persistence with denormalized counters on users.

Follow and unfollow touch three rows (the edge plus both users' counters) in
one transaction. update_follow_counts recomputes the counters from the edges.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Query, aliased

from inkwell.models import User, UserFollow
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import AlreadyFollowingError, NotFollowingError
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


class FollowRepository(BaseRepository):
    def _edge(self, follower_id: int, following_id: int) -> Query[UserFollow]:
        return self.db.query(UserFollow).filter(
            UserFollow.follower_id == follower_id,
            UserFollow.following_id == following_id,
        )

    def _bump(self, user_id: int, column: InstrumentedAttribute[int], delta: int) -> None:
        self.db.query(User).filter(User.id == user_id).update(
            {column: column + delta}, synchronize_session="fetch"
        )

    def is_following(self, follower_id: int, following_id: int) -> bool:
        return self.db.query(self._edge(follower_id, following_id).exists()).scalar()

    def follow(self, follower_id: int, following_id: int) -> UserFollow:
        edge = UserFollow(follower_id=follower_id, following_id=following_id)
        try:
            self.db.add(edge)
            self.db.flush()
            self._bump(follower_id, User.following_count, 1)
            self._bump(following_id, User.followers_count, 1)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AlreadyFollowingError() from exc
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(edge)
        return edge

    def unfollow(self, follower_id: int, following_id: int) -> None:
        try:
            deleted = self._edge(follower_id, following_id).delete(synchronize_session="fetch")
            if deleted == 0:
                raise NotFollowingError()
            self._bump(follower_id, User.following_count, -1)
            self._bump(following_id, User.followers_count, -1)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def get_followers(self, user_id: int, page: Pagination) -> tuple[list[User], int]:
        query = (
            self.db.query(User)
            .join(UserFollow, UserFollow.follower_id == User.id)
            .filter(UserFollow.following_id == user_id, User.deleted_at.is_(None))
            .order_by(UserFollow.created_at.desc())
        )
        return self.paginate(query, page)

    def get_following(self, user_id: int, page: Pagination) -> tuple[list[User], int]:
        query = (
            self.db.query(User)
            .join(UserFollow, UserFollow.following_id == User.id)
            .filter(UserFollow.follower_id == user_id, User.deleted_at.is_(None))
            .order_by(UserFollow.created_at.desc())
        )
        return self.paginate(query, page)

    def count_followers(self, user_id: int) -> int:
        return self.db.query(UserFollow).filter(UserFollow.following_id == user_id).count()

    def count_following(self, user_id: int) -> int:
        return self.db.query(UserFollow).filter(UserFollow.follower_id == user_id).count()

    def update_follow_counts(self, user_id: int) -> tuple[int, int]:
        """Overwrite a user's counters with counts from the edge table.

        Returns (followers_count, following_count).
        """
        followers = self.count_followers(user_id)
        following = self.count_following(user_id)
        self.db.query(User).filter(User.id == user_id).update(
            {User.followers_count: followers, User.following_count: following},
            synchronize_session="fetch",
        )
        self.commit()
        logger.info(
            "Follow counts recomputed: user_id=%s followers=%s following=%s",
            user_id,
            followers,
            following,
        )
        return followers, following

    def get_mutual_follows(self, user_a: int, user_b: int) -> list[User]:
        """Users followed by both user_a and user_b."""
        by_a = aliased(UserFollow)
        by_b = aliased(UserFollow)
        return (
            self.db.query(User)
            .join(by_a, by_a.following_id == User.id)
            .join(by_b, by_b.following_id == User.id)
            .filter(
                by_a.follower_id == user_a,
                by_b.follower_id == user_b,
                User.deleted_at.is_(None),
            )
            .all()
        )
