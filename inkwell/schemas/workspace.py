"""Workspace and membership schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from inkwell.schemas.user import UserSummary

Role = Literal["admin", "editor", "viewer"]


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    icon: str | None = Field(None, max_length=255)


class WorkspaceUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    icon: str | None = Field(None, max_length=255)


class WorkspaceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    icon: str | None
    created_by: int
    created_at: datetime
    updated_at: datetime


class MemberAdd(BaseModel):
    user_id: int = Field(..., gt=0)
    role: Role = "viewer"


class MemberRoleUpdate(BaseModel):
    role: Role


class MemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workspace_id: uuid.UUID
    user_id: int
    role: str
    user: UserSummary | None = None
    created_at: datetime
    updated_at: datetime
