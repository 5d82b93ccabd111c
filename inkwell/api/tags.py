"""Tag routes. Renaming and deleting are restricted to super admins."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from inkwell.api.deps import get_pagination, get_tag_service, require_admin, require_auth
from inkwell.api.responses import ok, paginated
from inkwell.schemas.common import APIResponse
from inkwell.schemas.post import TagCreate, TagRead
from inkwell.services.auth import TokenClaims
from inkwell.services.pagination import Pagination
from inkwell.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=APIResponse[list[TagRead]])
def list_tags(
    page: Pagination = Depends(get_pagination),
    tags: TagService = Depends(get_tag_service),
    _auth: TokenClaims = Depends(require_auth),
) -> APIResponse:
    items, total = tags.list_tags(page)
    return paginated(
        "Tags retrieved successfully", [TagRead.model_validate(t) for t in items], total, page
    )


@router.get("/{tag_id}", response_model=APIResponse[TagRead])
def get_tag(
    tag_id: uuid.UUID,
    tags: TagService = Depends(get_tag_service),
    _auth: TokenClaims = Depends(require_auth),
) -> APIResponse:
    return ok("Tag retrieved successfully", TagRead.model_validate(tags.get_tag(tag_id)))


@router.post("", response_model=APIResponse[TagRead], status_code=201)
def create_tag(
    body: TagCreate,
    tags: TagService = Depends(get_tag_service),
    _auth: TokenClaims = Depends(require_auth),
) -> APIResponse:
    return ok("Tag created successfully", TagRead.model_validate(tags.create_tag(body.name)))


@router.put("/{tag_id}", response_model=APIResponse[TagRead])
def update_tag(
    tag_id: uuid.UUID,
    body: TagCreate,
    tags: TagService = Depends(get_tag_service),
    _admin: TokenClaims = Depends(require_admin),
) -> APIResponse:
    tag = tags.rename_tag(tag_id, body.name)
    return ok("Tag updated successfully", TagRead.model_validate(tag))


@router.delete("/{tag_id}", response_model=APIResponse[None])
def delete_tag(
    tag_id: uuid.UUID,
    tags: TagService = Depends(get_tag_service),
    _admin: TokenClaims = Depends(require_admin),
) -> APIResponse:
    tags.delete_tag(tag_id)
    return ok("Tag deleted successfully")
