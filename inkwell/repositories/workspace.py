"""Workspace and membership persistence.

Creation and hard deletion are multi-statement writes; each runs in a single
session transaction and is rolled back as a whole on failure.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query

from inkwell.models import Workspace, WorkspaceMember
from inkwell.models.mixins import utcnow
from inkwell.models.workspace import ROLE_ADMIN
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import (
    ConflictError,
    MemberNotFoundError,
    WorkspaceExistsError,
    WorkspaceNotFoundError,
)
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "icon")


class WorkspaceRepository(BaseRepository):
    def _live(self) -> Query[Workspace]:
        return self.db.query(Workspace).filter(Workspace.deleted_at.is_(None))

    def exists(self, name: str, owner_id: int) -> bool:
        query = self._live().filter(Workspace.name == name, Workspace.created_by == owner_id)
        return self.db.query(query.exists()).scalar()

    def create(self, workspace: Workspace) -> Workspace:
        """Insert the workspace and its owner's admin membership atomically."""
        if self.exists(workspace.name, workspace.created_by):
            raise WorkspaceExistsError()
        try:
            self.db.add(workspace)
            self.db.flush()
            self.db.add(
                WorkspaceMember(
                    workspace_id=workspace.id,
                    user_id=workspace.created_by,
                    role=ROLE_ADMIN,
                )
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise WorkspaceExistsError() from exc
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(workspace)
        return workspace

    def get(self, workspace_id: uuid.UUID) -> Workspace | None:
        return self._live().filter(Workspace.id == workspace_id).first()

    def list(self, page: Pagination) -> tuple[list[Workspace], int]:
        query = self._live().order_by(Workspace.created_at.desc())
        return self.paginate(query, page)

    def list_for_user(self, user_id: int, page: Pagination) -> tuple[list[Workspace], int]:
        query = (
            self._live()
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .filter(WorkspaceMember.user_id == user_id)
            .order_by(Workspace.created_at.desc())
        )
        return self.paginate(query, page)

    def update(self, workspace_id: uuid.UUID, changes: dict[str, Any]) -> Workspace:
        workspace = self.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError()
        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(workspace, field, changes[field])
        self.commit(conflict=WorkspaceExistsError())
        self.db.refresh(workspace)
        return workspace

    def soft_delete(self, workspace_id: uuid.UUID) -> None:
        updated = (
            self._live()
            .filter(Workspace.id == workspace_id)
            .update({Workspace.deleted_at: utcnow()}, synchronize_session="fetch")
        )
        if updated == 0:
            self.db.rollback()
            raise WorkspaceNotFoundError()
        self.commit()

    def hard_delete(self, workspace_id: uuid.UUID) -> None:
        """Purge members, then the workspace row, tombstoned or not."""
        try:
            self.db.query(WorkspaceMember).filter(
                WorkspaceMember.workspace_id == workspace_id
            ).delete(synchronize_session="fetch")
            deleted = (
                self.db.query(Workspace)
                .filter(Workspace.id == workspace_id)
                .delete(synchronize_session="fetch")
            )
            if deleted == 0:
                raise WorkspaceNotFoundError()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Membership

    def get_member(self, workspace_id: uuid.UUID, user_id: int) -> WorkspaceMember | None:
        return (
            self.db.query(WorkspaceMember)
            .filter(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
            )
            .first()
        )

    def add_member(self, workspace_id: uuid.UUID, user_id: int, role: str) -> WorkspaceMember:
        """Add a member; an existing pair has its role updated instead."""
        if self.get(workspace_id) is None:
            raise WorkspaceNotFoundError()
        existing = self.get_member(workspace_id, user_id)
        if existing is not None:
            if existing.role == role:
                return existing
            return self.update_member_role(workspace_id, user_id, role)
        member = WorkspaceMember(workspace_id=workspace_id, user_id=user_id, role=role)
        self.db.add(member)
        self.commit(conflict=ConflictError("user is already a member of this workspace"))
        self.db.refresh(member)
        return member

    def update_member_role(
        self, workspace_id: uuid.UUID, user_id: int, role: str
    ) -> WorkspaceMember:
        member = self.get_member(workspace_id, user_id)
        if member is None:
            raise MemberNotFoundError()
        member.role = role
        self.commit()
        self.db.refresh(member)
        return member

    def remove_member(self, workspace_id: uuid.UUID, user_id: int) -> None:
        deleted = (
            self.db.query(WorkspaceMember)
            .filter(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
            )
            .delete(synchronize_session="fetch")
        )
        if deleted == 0:
            self.db.rollback()
            raise MemberNotFoundError()
        self.commit()

    def list_members(self, workspace_id: uuid.UUID) -> list[WorkspaceMember]:
        return (
            self.db.query(WorkspaceMember)
            .filter(WorkspaceMember.workspace_id == workspace_id)
            .order_by(WorkspaceMember.created_at, WorkspaceMember.user_id)
            .all()
        )

    def is_member(self, workspace_id: uuid.UUID, user_id: int) -> tuple[bool, str]:
        member = self.get_member(workspace_id, user_id)
        if member is None:
            return False, ""
        return True, member.role
