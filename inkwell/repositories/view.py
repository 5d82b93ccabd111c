"""Post view persistence."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from inkwell.models import Post, PostView
from inkwell.repositories.base import BaseRepository
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


@dataclass
class ViewStats:
    total_views: int
    unique_viewers: int
    anonymous_views: int
    authenticated_views: int


class ViewRepository(BaseRepository):
    def has_viewed(self, post_id: uuid.UUID, user_id: int) -> bool:
        query = self.db.query(PostView).filter(
            PostView.post_id == post_id, PostView.user_id == user_id
        )
        return self.db.query(query.exists()).scalar()

    def record(self, view: PostView) -> PostView | None:
        """Insert the view and bump the post's view_count in one transaction.

        Returns None when the user already has a view of the post; the unique
        (post_id, user_id) index rejects the racing insert and nothing is written.
        """
        try:
            self.db.add(view)
            self.db.flush()
            self.db.query(Post).filter(Post.id == view.post_id).update(
                {Post.view_count: Post.view_count + 1}, synchronize_session="fetch"
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if view.user_id is None:
                raise
            logger.info(
                "Duplicate view ignored: post_id=%s user_id=%s", view.post_id, view.user_id
            )
            return None
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(view)
        return view

    def list_by_post(self, post_id: uuid.UUID, page: Pagination) -> tuple[list[PostView], int]:
        query = (
            self.db.query(PostView)
            .filter(PostView.post_id == post_id)
            .order_by(PostView.created_at.desc())
        )
        return self.paginate(query, page)

    def count_by_post(self, post_id: uuid.UUID) -> int:
        return self.db.query(PostView).filter(PostView.post_id == post_id).count()

    def stats(self, post_id: uuid.UUID) -> ViewStats:
        total, unique_viewers, anonymous = (
            self.db.query(
                func.count(PostView.id),
                func.count(func.distinct(PostView.user_id)),
                func.count(PostView.id).filter(PostView.user_id.is_(None)),
            )
            .filter(PostView.post_id == post_id)
            .one()
        )
        return ViewStats(
            total_views=total,
            unique_viewers=unique_viewers,
            anonymous_views=anonymous,
            authenticated_views=total - anonymous,
        )
