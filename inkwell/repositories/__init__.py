"""Repositories: one per aggregate, each bound to an injected Session."""

from inkwell.repositories.chat import ChatRepository
from inkwell.repositories.comment import CommentRepository
from inkwell.repositories.follow import FollowRepository
from inkwell.repositories.like import LikeRepository
from inkwell.repositories.page import BlockRepository, PageRepository
from inkwell.repositories.post import PostRepository
from inkwell.repositories.session import SessionRepository
from inkwell.repositories.tag import TagRepository
from inkwell.repositories.user import UserRepository
from inkwell.repositories.view import ViewRepository
from inkwell.repositories.workspace import WorkspaceRepository

__all__ = [
    "BlockRepository",
    "ChatRepository",
    "CommentRepository",
    "FollowRepository",
    "LikeRepository",
    "PageRepository",
    "PostRepository",
    "SessionRepository",
    "TagRepository",
    "UserRepository",
    "ViewRepository",
    "WorkspaceRepository",
]
