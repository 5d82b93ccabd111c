"""Post like persistence."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Query

from inkwell.models import PostLike
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import AlreadyLikedError, NotLikedError
from inkwell.services.pagination import Pagination


class LikeRepository(BaseRepository):
    def _pair(self, post_id: uuid.UUID, user_id: int) -> Query[PostLike]:
        return self.db.query(PostLike).filter(
            PostLike.post_id == post_id, PostLike.user_id == user_id
        )

    def has_liked(self, post_id: uuid.UUID, user_id: int) -> bool:
        return self.db.query(self._pair(post_id, user_id).exists()).scalar()

    def create(self, post_id: uuid.UUID, user_id: int) -> PostLike:
        like = PostLike(post_id=post_id, user_id=user_id)
        self.db.add(like)
        self.commit(conflict=AlreadyLikedError())
        self.db.refresh(like)
        return like

    def delete(self, post_id: uuid.UUID, user_id: int) -> None:
        deleted = self._pair(post_id, user_id).delete(synchronize_session="fetch")
        if deleted == 0:
            self.db.rollback()
            raise NotLikedError()
        self.commit()

    def list_by_post(self, post_id: uuid.UUID, page: Pagination) -> tuple[list[PostLike], int]:
        query = (
            self.db.query(PostLike)
            .filter(PostLike.post_id == post_id)
            .order_by(PostLike.created_at.desc())
        )
        return self.paginate(query, page)

    def count_by_post(self, post_id: uuid.UUID) -> int:
        return self.db.query(PostLike).filter(PostLike.post_id == post_id).count()
