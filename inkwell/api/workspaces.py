"""Workspace and membership routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from inkwell.api.deps import get_pagination, get_workspace_service, require_admin, require_auth
from inkwell.api.responses import ok, paginated
from inkwell.models.workspace import ROLE_ADMIN
from inkwell.schemas.common import APIResponse
from inkwell.schemas.workspace import (
    MemberAdd,
    MemberRead,
    MemberRoleUpdate,
    WorkspaceCreate,
    WorkspaceRead,
    WorkspaceUpdate,
)
from inkwell.services.auth import TokenClaims
from inkwell.services.pagination import Pagination
from inkwell.services.workspace_service import WorkspaceService

router = APIRouter()


@router.post("", response_model=APIResponse[WorkspaceRead], status_code=201)
def create_workspace(
    body: WorkspaceCreate,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Create a workspace owned by the caller, who becomes its admin."""
    workspace = workspaces.create_workspace(
        name=body.name,
        owner_id=claims.user_id,
        description=body.description,
        icon=body.icon,
    )
    return ok("Workspace created successfully", WorkspaceRead.model_validate(workspace))


@router.get("", response_model=APIResponse[list[WorkspaceRead]])
def list_workspaces(
    page: Pagination = Depends(get_pagination),
    workspaces: WorkspaceService = Depends(get_workspace_service),
    _admin: TokenClaims = Depends(require_admin),
) -> APIResponse:
    items, total = workspaces.list_workspaces(page)
    return paginated(
        "Workspaces retrieved successfully",
        [WorkspaceRead.model_validate(w) for w in items],
        total,
        page,
    )


@router.get("/me", response_model=APIResponse[list[WorkspaceRead]])
def list_my_workspaces(
    page: Pagination = Depends(get_pagination),
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Workspaces the caller is a member of."""
    items, total = workspaces.list_user_workspaces(claims.user_id, page)
    return paginated(
        "Workspaces retrieved successfully",
        [WorkspaceRead.model_validate(w) for w in items],
        total,
        page,
    )


@router.get("/{workspace_id}", response_model=APIResponse[WorkspaceRead])
def get_workspace(
    workspace_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    workspaces.require_role(workspace_id, claims)
    workspace = workspaces.get_workspace(workspace_id)
    return ok("Workspace retrieved successfully", WorkspaceRead.model_validate(workspace))


@router.put("/{workspace_id}", response_model=APIResponse[WorkspaceRead])
def update_workspace(
    workspace_id: uuid.UUID,
    body: WorkspaceUpdate,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    workspaces.require_role(workspace_id, claims, roles=(ROLE_ADMIN,))
    workspace = workspaces.update_workspace(workspace_id, body.model_dump(exclude_unset=True))
    return ok("Workspace updated successfully", WorkspaceRead.model_validate(workspace))


@router.delete("/{workspace_id}", response_model=APIResponse[None])
def delete_workspace(
    workspace_id: uuid.UUID,
    hard: bool = Query(False, description="Permanently remove the workspace and its members"),
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Soft delete by default. ``hard=true`` is restricted to super admins."""
    if hard:
        require_admin(claims)
        workspaces.hard_delete_workspace(workspace_id)
        return ok("Workspace permanently deleted")
    workspaces.require_role(workspace_id, claims, roles=(ROLE_ADMIN,))
    workspaces.delete_workspace(workspace_id)
    return ok("Workspace deleted successfully")


@router.post("/{workspace_id}/members", response_model=APIResponse[MemberRead], status_code=201)
def add_member(
    workspace_id: uuid.UUID,
    body: MemberAdd,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Add a member; an existing member gets the requested role."""
    workspaces.require_role(workspace_id, claims, roles=(ROLE_ADMIN,))
    member = workspaces.add_member(workspace_id, body.user_id, body.role)
    return ok("Member added successfully", MemberRead.model_validate(member))


@router.get("/{workspace_id}/members", response_model=APIResponse[list[MemberRead]])
def list_members(
    workspace_id: uuid.UUID,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    workspaces.require_role(workspace_id, claims)
    members = workspaces.list_members(workspace_id)
    return ok("Members retrieved successfully", [MemberRead.model_validate(m) for m in members])


@router.put("/{workspace_id}/members/{user_id}", response_model=APIResponse[MemberRead])
def update_member_role(
    workspace_id: uuid.UUID,
    user_id: int,
    body: MemberRoleUpdate,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    workspaces.require_role(workspace_id, claims, roles=(ROLE_ADMIN,))
    member = workspaces.update_member_role(workspace_id, user_id, body.role)
    return ok("Member role updated successfully", MemberRead.model_validate(member))


@router.delete("/{workspace_id}/members/{user_id}", response_model=APIResponse[None])
def remove_member(
    workspace_id: uuid.UUID,
    user_id: int,
    claims: TokenClaims = Depends(require_auth),
    workspaces: WorkspaceService = Depends(get_workspace_service),
) -> APIResponse:
    """Admins remove anyone; a member may remove themselves."""
    if user_id != claims.user_id:
        workspaces.require_role(workspace_id, claims, roles=(ROLE_ADMIN,))
    workspaces.remove_member(workspace_id, user_id)
    return ok("Member removed successfully")
