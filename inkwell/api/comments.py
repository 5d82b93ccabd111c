"""Comment edit/delete routes (creation lives under /posts/{id}/comments)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from inkwell.api.deps import get_comment_service, require_auth
from inkwell.api.responses import ok
from inkwell.schemas.common import APIResponse
from inkwell.schemas.post import CommentCreate, CommentRead
from inkwell.services.auth import TokenClaims
from inkwell.services.comment_service import CommentService

router = APIRouter()


@router.get("/{comment_id}", response_model=APIResponse[CommentRead])
def get_comment(
    comment_id: uuid.UUID, comments: CommentService = Depends(get_comment_service)
) -> APIResponse:
    comment = comments.get_comment(comment_id)
    return ok("Comment retrieved successfully", CommentRead.model_validate(comment))


@router.put("/{comment_id}", response_model=APIResponse[CommentRead])
def update_comment(
    comment_id: uuid.UUID,
    body: CommentCreate,
    claims: TokenClaims = Depends(require_auth),
    comments: CommentService = Depends(get_comment_service),
) -> APIResponse:
    comment = comments.update_comment(comment_id, claims.user_id, body.content)
    return ok("Comment updated successfully", CommentRead.model_validate(comment))


@router.delete("/{comment_id}", response_model=APIResponse[None])
def delete_comment(
    comment_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    comments: CommentService = Depends(get_comment_service),
) -> APIResponse:
    comments.delete_comment(comment_id, claims)
    return ok("Comment deleted successfully")
