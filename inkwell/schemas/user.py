"""User and follow schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    """Public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    first_name: str
    last_name: str
    followers_count: int
    following_count: int
    created_at: datetime


class UserMe(UserRead):
    email: str
    is_super_admin: bool


class UserSummary(BaseModel):
    """Compact user reference used in lists."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str


class UserWithFollowStatus(UserRead):
    is_following: bool = False


class FollowRequest(BaseModel):
    user_id: int = Field(..., gt=0)


class FollowResponse(BaseModel):
    is_following: bool
    message: str


class FollowStatusResponse(BaseModel):
    user_id: int
    is_following: bool


class FollowStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    followers_count: int
    following_count: int
