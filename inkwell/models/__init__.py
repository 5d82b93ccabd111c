"""SQLAlchemy models."""

from inkwell.models.chat import ChatConversation, ChatMessage
from inkwell.models.engagement import PostLike, PostView, UserFollow
from inkwell.models.page import Block, Page
from inkwell.models.post import Post, PostComment, Tag, posts_to_tags
from inkwell.models.user import User
from inkwell.models.user_session import UserSession
from inkwell.models.workspace import Workspace, WorkspaceMember

__all__ = [
    "Block",
    "ChatConversation",
    "ChatMessage",
    "Page",
    "Post",
    "PostComment",
    "PostLike",
    "PostView",
    "Tag",
    "User",
    "UserFollow",
    "UserSession",
    "Workspace",
    "WorkspaceMember",
    "posts_to_tags",
]
