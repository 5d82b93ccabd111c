"""Workspace service: creation, membership and role checks."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection
from typing import Any

from inkwell.models import Workspace, WorkspaceMember
from inkwell.models.workspace import MEMBER_ROLES, ROLE_ADMIN
from inkwell.repositories.user import UserRepository
from inkwell.repositories.workspace import WorkspaceRepository
from inkwell.services.auth import TokenClaims
from inkwell.services.errors import (
    ForbiddenError,
    UserNotFoundError,
    ValidationFailedError,
    WorkspaceNotFoundError,
)
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


def _validate_role(role: str) -> str:
    if role not in MEMBER_ROLES:
        raise ValidationFailedError(f"invalid role: must be one of {', '.join(MEMBER_ROLES)}")
    return role


class WorkspaceService:
    def __init__(self, workspaces: WorkspaceRepository, users: UserRepository) -> None:
        self.workspaces = workspaces
        self.users = users

    def create_workspace(
        self,
        name: str,
        owner_id: int,
        description: str | None = None,
        icon: str | None = None,
    ) -> Workspace:
        """Create a workspace; the owner becomes its admin member in the same transaction."""
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError("workspace name is required")
        if not self.users.exists(owner_id):
            raise UserNotFoundError()
        workspace = self.workspaces.create(
            Workspace(name=name, description=description, icon=icon, created_by=owner_id)
        )
        logger.info("Workspace created: id=%s owner_id=%s", workspace.id, owner_id)
        return workspace

    def get_workspace(self, workspace_id: uuid.UUID) -> Workspace:
        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError()
        return workspace

    def list_workspaces(self, page: Pagination) -> tuple[list[Workspace], int]:
        return self.workspaces.list(page)

    def list_user_workspaces(self, user_id: int, page: Pagination) -> tuple[list[Workspace], int]:
        return self.workspaces.list_for_user(user_id, page)

    def update_workspace(self, workspace_id: uuid.UUID, changes: dict[str, Any]) -> Workspace:
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationFailedError("workspace name cannot be empty")
            changes = {**changes, "name": name}
        return self.workspaces.update(workspace_id, changes)

    def delete_workspace(self, workspace_id: uuid.UUID) -> None:
        self.workspaces.soft_delete(workspace_id)
        logger.info("Workspace soft-deleted: id=%s", workspace_id)

    def hard_delete_workspace(self, workspace_id: uuid.UUID) -> None:
        self.workspaces.hard_delete(workspace_id)
        logger.warning("Workspace hard-deleted: id=%s", workspace_id)

    # Membership

    def add_member(self, workspace_id: uuid.UUID, user_id: int, role: str) -> WorkspaceMember:
        """Add a member, or update the role of an existing one."""
        _validate_role(role)
        if self.workspaces.get(workspace_id) is None:
            raise WorkspaceNotFoundError()
        if not self.users.exists(user_id):
            raise UserNotFoundError()
        member = self.workspaces.add_member(workspace_id, user_id, role)
        logger.info(
            "Workspace member set: workspace_id=%s user_id=%s role=%s",
            workspace_id,
            user_id,
            member.role,
        )
        return member

    def update_member_role(
        self, workspace_id: uuid.UUID, user_id: int, role: str
    ) -> WorkspaceMember:
        _validate_role(role)
        member = self.workspaces.update_member_role(workspace_id, user_id, role)
        logger.info(
            "Workspace member role changed: workspace_id=%s user_id=%s role=%s",
            workspace_id,
            user_id,
            role,
        )
        return member

    def remove_member(self, workspace_id: uuid.UUID, user_id: int) -> None:
        self.workspaces.remove_member(workspace_id, user_id)
        logger.info("Workspace member removed: workspace_id=%s user_id=%s", workspace_id, user_id)

    def list_members(self, workspace_id: uuid.UUID) -> list[WorkspaceMember]:
        self.get_workspace(workspace_id)
        return self.workspaces.list_members(workspace_id)

    def is_member(self, workspace_id: uuid.UUID, user_id: int) -> tuple[bool, str]:
        return self.workspaces.is_member(workspace_id, user_id)

    def require_role(
        self,
        workspace_id: uuid.UUID,
        claims: TokenClaims,
        roles: Collection[str] = MEMBER_ROLES,
    ) -> str:
        """Return the caller's role in the workspace, or raise.

        Super admins pass as admin. Raises WorkspaceNotFoundError if the
        workspace is absent and ForbiddenError if the caller lacks a role in
        ``roles``.
        """
        self.get_workspace(workspace_id)
        if claims.is_super_admin:
            return ROLE_ADMIN
        is_member, role = self.workspaces.is_member(workspace_id, claims.user_id)
        if not is_member or role not in roles:
            raise ForbiddenError()
        return role
