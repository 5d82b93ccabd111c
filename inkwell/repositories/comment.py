"""Post comment persistence."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Query

from inkwell.models import PostComment
from inkwell.repositories.base import BaseRepository
from inkwell.services.pagination import Pagination


class CommentRepository(BaseRepository):
    def _live(self) -> Query[PostComment]:
        return self.db.query(PostComment).filter(PostComment.deleted_at.is_(None))

    def create(self, comment: PostComment) -> PostComment:
        self.db.add(comment)
        self.commit()
        self.db.refresh(comment)
        return comment

    def get(self, comment_id: uuid.UUID) -> PostComment | None:
        return self._live().filter(PostComment.id == comment_id).first()

    def list_by_post(
        self, post_id: uuid.UUID, page: Pagination
    ) -> tuple[list[PostComment], int]:
        query = (
            self._live()
            .filter(PostComment.post_id == post_id)
            .order_by(PostComment.created_at.desc())
        )
        return self.paginate(query, page)

    def save(self, comment: PostComment) -> PostComment:
        self.commit()
        self.db.refresh(comment)
        return comment

    def soft_delete(self, comment: PostComment) -> None:
        comment.mark_deleted()
        self.commit()
