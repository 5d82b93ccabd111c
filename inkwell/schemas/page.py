"""Page and block schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageCreate(BaseModel):
    workspace_id: uuid.UUID
    title: str = Field(..., max_length=255)
    parent_id: uuid.UUID | None = None
    icon: str | None = Field(None, max_length=255)


class PageUpdate(BaseModel):
    title: str | None = Field(None, max_length=255)
    parent_id: uuid.UUID | None = None
    icon: str | None = Field(None, max_length=255)


class BlockCreate(BaseModel):
    type: str = Field(..., min_length=1, max_length=50)
    props: dict[str, Any] = Field(default_factory=dict)
    content: Any = None
    parent_id: uuid.UUID | None = None
    position: float | None = None


class BlockUpdate(BaseModel):
    """Partial update; routes dump it with ``exclude_unset``."""

    type: str = Field(None, min_length=1, max_length=50)
    props: dict[str, Any] = Field(default_factory=dict)
    content: Any = None


class BlockMove(BaseModel):
    after_id: uuid.UUID | None = None
    before_id: uuid.UUID | None = None


class BlockRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    page_id: uuid.UUID
    parent_id: uuid.UUID | None
    type: str
    props: dict[str, Any]
    content: Any
    position: float
    created_by: int
    created_at: datetime
    updated_at: datetime


class PageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workspace_id: uuid.UUID
    parent_id: uuid.UUID | None
    title: str
    icon: str | None
    created_by: int
    created_at: datetime
    updated_at: datetime


class PageDetail(PageRead):
    blocks: list[BlockRead] = []
