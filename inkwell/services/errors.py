"""Domain errors raised by services and repositories.

Each error carries a stable ``code`` and the HTTP status the API layer maps it
to. Infrastructure failures (SQLAlchemyError and friends) are not wrapped here;
they propagate and are reported as internal errors.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for domain errors."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(AppError):
    code = "VALIDATION_FAILED"
    status_code = 400
    default_message = "validation failed"


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "unauthorized"


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "forbidden: insufficient privileges"


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "resource not found"


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "resource already exists"


class InternalError(AppError):
    pass


# Users
class UserNotFoundError(NotFoundError):
    default_message = "user not found"


class UserExistsError(ConflictError):
    default_message = "user already exists"


# Workspaces
class WorkspaceNotFoundError(NotFoundError):
    default_message = "workspace not found"


class WorkspaceExistsError(ConflictError):
    default_message = "workspace already exists with this name"


class MemberNotFoundError(NotFoundError):
    """Raised when a (workspace, user) membership pair does not exist."""

    default_message = "workspace member not found"


# Pages and blocks
class PageNotFoundError(NotFoundError):
    default_message = "page not found"


class BlockNotFoundError(NotFoundError):
    default_message = "block not found"


# Follow graph
class SelfFollowError(ConflictError):
    default_message = "cannot follow yourself"


class AlreadyFollowingError(ConflictError):
    default_message = "already following this user"


class NotFollowingError(NotFoundError):
    default_message = "not following this user"


# Posts and engagement
class PostNotFoundError(NotFoundError):
    default_message = "post not found"


class AlreadyLikedError(ConflictError):
    default_message = "user has already liked this post"


class NotLikedError(NotFoundError):
    default_message = "user has not liked this post"


class CommentNotFoundError(NotFoundError):
    default_message = "comment not found"


class TagNotFoundError(NotFoundError):
    default_message = "tag not found"


class TagExistsError(ConflictError):
    default_message = "tag already exists"


# Chat
class ConversationNotFoundError(NotFoundError):
    default_message = "conversation not found"


class ConversationAccessError(ForbiddenError):
    default_message = "access denied: conversation does not belong to user"
