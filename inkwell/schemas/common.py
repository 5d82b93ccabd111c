"""Response envelopes shared by every endpoint."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from inkwell.services.pagination import Pagination, total_pages

T = TypeVar("T")


class PaginationMeta(BaseModel):
    total_items: int
    offset: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total_items: int, page: Pagination) -> PaginationMeta:
        return cls(
            total_items=total_items,
            offset=page.offset,
            limit=page.limit,
            total_pages=total_pages(total_items, page.limit),
        )


class APIResponse(BaseModel, Generic[T]):
    """Success envelope: {success, message, data, meta}."""

    success: bool = True
    message: str
    data: T | None = None
    meta: PaginationMeta | None = None


class ErrorResponse(BaseModel):
    """Failure envelope: {success, message, error}."""

    success: bool = False
    message: str
    error: str | None = None
