"""Offset/limit pagination helpers shared by services and routes."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    offset: int = 0
    limit: int = DEFAULT_LIMIT

    @classmethod
    def clamped(cls, offset: int | None, limit: int | None) -> Pagination:
        """Normalize raw values: limit defaults to 10 and is capped at 100, offset >= 0."""
        if limit is None or limit <= 0:
            limit = DEFAULT_LIMIT
        limit = min(limit, MAX_LIMIT)
        offset = max(offset or 0, 0)
        return cls(offset=offset, limit=limit)

    @classmethod
    def from_page(cls, page: int, limit: int) -> Pagination:
        """Convert 1-based page numbers to an offset."""
        clamped = cls.clamped(0, limit)
        return cls(offset=(max(page, 1) - 1) * clamped.limit, limit=clamped.limit)


def total_pages(total_items: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total_items / limit)
