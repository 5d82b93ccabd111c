"""Post, tag, comment, like and view schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inkwell.schemas.user import UserSummary


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = ""
    tags: list[str] = Field(default_factory=list, max_length=20)


class PostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    body: str | None = None
    tags: list[str] | None = Field(None, max_length=20)


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    slug: str
    body: str
    photo_url: str | None
    view_count: int
    created_by: int
    author: UserSummary | None = None
    tags: list[TagRead] = []
    created_at: datetime
    updated_at: datetime


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    content: str
    created_by: int
    author: UserSummary | None = None
    created_at: datetime
    updated_at: datetime


class LikeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    user_id: int
    created_at: datetime


class LikeStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    total_likes: int


class ViewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    user_id: int | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime


class ViewStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: uuid.UUID
    total_views: int
    unique_viewers: int
    anonymous_views: int
    authenticated_views: int


class LikedStatus(BaseModel):
    post_id: uuid.UUID
    liked: bool


class ViewedStatus(BaseModel):
    post_id: uuid.UUID
    viewed: bool
