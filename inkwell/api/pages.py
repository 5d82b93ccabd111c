"""Page and block routes.

Page access follows workspace membership: any member may read, admins and
editors may write.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from inkwell.api.deps import (
    get_block_service,
    get_page_service,
    get_workspace_service,
    require_auth,
)
from inkwell.api.responses import ok
from inkwell.models.workspace import ROLE_ADMIN, ROLE_EDITOR
from inkwell.schemas.common import APIResponse
from inkwell.schemas.page import (
    BlockCreate,
    BlockMove,
    BlockRead,
    BlockUpdate,
    PageCreate,
    PageDetail,
    PageRead,
    PageUpdate,
)
from inkwell.services.auth import TokenClaims
from inkwell.services.page_service import BlockService, PageService
from inkwell.services.workspace_service import WorkspaceService

router = APIRouter()
blocks_router = APIRouter()

WRITE_ROLES = (ROLE_ADMIN, ROLE_EDITOR)


@router.post("", response_model=APIResponse[PageRead], status_code=201)
def create_page(
    body: PageCreate,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    workspaces.require_role(body.workspace_id, claims, roles=WRITE_ROLES)
    page = pages.create_page(
        workspace_id=body.workspace_id,
        title=body.title,
        created_by=claims.user_id,
        parent_id=body.parent_id,
        icon=body.icon,
    )
    return ok("Page created successfully", PageRead.model_validate(page))


@router.get("/workspace/{workspace_id}", response_model=APIResponse[list[PageRead]])
def list_workspace_pages(
    workspace_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """All live pages of a workspace, flat; clients build the tree from parent_id."""
    workspaces.require_role(workspace_id, claims)
    items = pages.list_workspace_pages(workspace_id)
    return ok("Pages retrieved successfully", [PageRead.model_validate(p) for p in items])


@router.get("/children/{parent_id}", response_model=APIResponse[list[PageRead]])
def list_child_pages(
    parent_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    parent = pages.get_page(parent_id, with_blocks=False)
    workspaces.require_role(parent.workspace_id, claims)
    items = pages.list_child_pages(parent_id)
    return ok("Child pages retrieved successfully", [PageRead.model_validate(p) for p in items])


@router.get("/{page_id}", response_model=APIResponse[PageDetail])
def get_page(
    page_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    page = pages.get_page(page_id)
    workspaces.require_role(page.workspace_id, claims)
    return ok("Page retrieved successfully", PageDetail.model_validate(page))


@router.put("/{page_id}", response_model=APIResponse[PageRead])
def update_page(
    page_id: uuid.UUID,
    body: PageUpdate,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    existing = pages.get_page(page_id, with_blocks=False)
    workspaces.require_role(existing.workspace_id, claims, roles=WRITE_ROLES)
    page = pages.update_page(page_id, body.model_dump(exclude_unset=True))
    return ok("Page updated successfully", PageRead.model_validate(page))


@router.delete("/{page_id}", response_model=APIResponse[None])
def delete_page(
    page_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    existing = pages.get_page(page_id, with_blocks=False)
    workspaces.require_role(existing.workspace_id, claims, roles=WRITE_ROLES)
    pages.delete_page(page_id)
    return ok("Page deleted successfully")


@router.post("/{page_id}/blocks", response_model=APIResponse[BlockRead], status_code=201)
def create_block(
    page_id: uuid.UUID,
    body: BlockCreate,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    blocks: BlockService = Depends(get_block_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Create a block; without ``position`` it is appended after its last sibling."""
    page = pages.get_page(page_id, with_blocks=False)
    workspaces.require_role(page.workspace_id, claims, roles=WRITE_ROLES)
    block = blocks.create_block(
        page_id=page_id,
        type=body.type,
        created_by=claims.user_id,
        props=body.props,
        content=body.content,
        parent_id=body.parent_id,
        position=body.position,
    )
    return ok("Block created successfully", BlockRead.model_validate(block))


@router.get("/{page_id}/blocks", response_model=APIResponse[list[BlockRead]])
def list_blocks(
    page_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    blocks: BlockService = Depends(get_block_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    page = pages.get_page(page_id, with_blocks=False)
    workspaces.require_role(page.workspace_id, claims)
    items = blocks.list_blocks(page_id)
    return ok("Blocks retrieved successfully", [BlockRead.model_validate(b) for b in items])


def _authorize_block_write(
    block_id: uuid.UUID,
    claims: TokenClaims,
    pages: PageService,
    blocks: BlockService,
    workspaces: WorkspaceService,
) -> None:
    block = blocks.get_block(block_id)
    page = pages.get_page(block.page_id, with_blocks=False)
    workspaces.require_role(page.workspace_id, claims, roles=WRITE_ROLES)


@blocks_router.put("/{block_id}", response_model=APIResponse[BlockRead])
def update_block(
    block_id: uuid.UUID,
    body: BlockUpdate,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    blocks: BlockService = Depends(get_block_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    _authorize_block_write(block_id, claims, pages, blocks, workspaces)
    block = blocks.update_block(block_id, body.model_dump(exclude_unset=True))
    return ok("Block updated successfully", BlockRead.model_validate(block))


@blocks_router.post("/{block_id}/move", response_model=APIResponse[BlockRead])
def move_block(
    block_id: uuid.UUID,
    body: BlockMove,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    blocks: BlockService = Depends(get_block_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Reorder a block among its siblings (after ``after_id`` or before ``before_id``)."""
    _authorize_block_write(block_id, claims, pages, blocks, workspaces)
    block = blocks.move_block(block_id, after_id=body.after_id, before_id=body.before_id)
    return ok("Block moved successfully", BlockRead.model_validate(block))


@blocks_router.delete("/{block_id}", response_model=APIResponse[None])
def delete_block(
    block_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    pages: PageService = Depends(get_page_service),
    blocks: BlockService = Depends(get_block_service),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    _authorize_block_write(block_id, claims, pages, blocks, workspaces)
    blocks.delete_block(block_id)
    return ok("Block deleted successfully")
