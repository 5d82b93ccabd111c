"""Comment service."""

from __future__ import annotations

import uuid

from inkwell.models import PostComment
from inkwell.repositories.comment import CommentRepository
from inkwell.repositories.post import PostRepository
from inkwell.services.auth import TokenClaims
from inkwell.services.errors import (
    CommentNotFoundError,
    ForbiddenError,
    PostNotFoundError,
    ValidationFailedError,
)
from inkwell.services.pagination import Pagination


def _clean_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationFailedError("comment content is required")
    return content


class CommentService:
    def __init__(self, comments: CommentRepository, posts: PostRepository) -> None:
        self.comments = comments
        self.posts = posts

    def create_comment(self, post_id: uuid.UUID, user_id: int, content: str) -> PostComment:
        content = _clean_content(content)
        if not self.posts.exists(post_id):
            raise PostNotFoundError()
        return self.comments.create(
            PostComment(post_id=post_id, content=content, created_by=user_id)
        )

    def list_comments(
        self, post_id: uuid.UUID, page: Pagination
    ) -> tuple[list[PostComment], int]:
        if not self.posts.exists(post_id):
            raise PostNotFoundError()
        return self.comments.list_by_post(post_id, page)

    def get_comment(self, comment_id: uuid.UUID) -> PostComment:
        comment = self.comments.get(comment_id)
        if comment is None:
            raise CommentNotFoundError()
        return comment

    def update_comment(self, comment_id: uuid.UUID, user_id: int, content: str) -> PostComment:
        """Only the author may edit a comment."""
        comment = self.get_comment(comment_id)
        if comment.created_by != user_id:
            raise ForbiddenError("only the author can edit this comment")
        comment.content = _clean_content(content)
        return self.comments.save(comment)

    def delete_comment(self, comment_id: uuid.UUID, claims: TokenClaims) -> None:
        comment = self.get_comment(comment_id)
        if comment.created_by != claims.user_id and not claims.is_super_admin:
            raise ForbiddenError("only the author can delete this comment")
        self.comments.soft_delete(comment)
