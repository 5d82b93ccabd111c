"""Post persistence."""

from __future__ import annotations

import uuid

from sqlalchemy import func
from sqlalchemy.orm import Query

from inkwell.models import Post, Tag, User
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import ConflictError, PostNotFoundError
from inkwell.services.pagination import Pagination


class PostRepository(BaseRepository):
    def _live(self) -> Query[Post]:
        return self.db.query(Post).filter(Post.deleted_at.is_(None))

    def create(self, post: Post) -> Post:
        self.db.add(post)
        self.commit(conflict=ConflictError("a post with this slug already exists"))
        self.db.refresh(post)
        return post

    def get(self, post_id: uuid.UUID) -> Post | None:
        return self._live().filter(Post.id == post_id).first()

    def get_by_slug(self, slug: str) -> Post | None:
        return self._live().filter(Post.slug == slug).first()

    def exists(self, post_id: uuid.UUID) -> bool:
        return self.db.query(self._live().filter(Post.id == post_id).exists()).scalar()

    def slug_taken(self, slug: str) -> bool:
        # Tombstoned posts keep their slug reserved by the unique constraint.
        return self.db.query(self.db.query(Post).filter(Post.slug == slug).exists()).scalar()

    def list(self, page: Pagination, author_id: int | None = None) -> tuple[list[Post], int]:
        query = self._live()
        if author_id is not None:
            query = query.filter(Post.created_by == author_id)
        return self.paginate(query.order_by(Post.created_at.desc()), page)

    def list_by_tag(self, tag_name: str, page: Pagination) -> tuple[list[Post], int]:
        query = (
            self._live()
            .join(Post.tags)
            .filter(Tag.name == tag_name, Tag.deleted_at.is_(None))
        )
        return self.paginate(query.order_by(Post.created_at.desc()), page)

    def list_by_username(self, username: str, page: Pagination) -> tuple[list[Post], int]:
        query = (
            self._live()
            .join(Post.author)
            .filter(User.username == username, User.deleted_at.is_(None))
        )
        return self.paginate(query.order_by(Post.created_at.desc()), page)

    def get_by_author_and_slug(self, username: str, slug: str) -> Post | None:
        return (
            self._live()
            .join(Post.author)
            .filter(User.username == username, User.deleted_at.is_(None), Post.slug == slug)
            .first()
        )

    def random(self, limit: int) -> list[Post]:
        return self._live().order_by(func.random()).limit(limit).all()

    def save(self, post: Post) -> Post:
        self.commit(conflict=ConflictError("a post with this slug already exists"))
        self.db.refresh(post)
        return post

    def soft_delete(self, post_id: uuid.UUID) -> None:
        post = self.get(post_id)
        if post is None:
            raise PostNotFoundError()
        post.mark_deleted()
        self.commit()
