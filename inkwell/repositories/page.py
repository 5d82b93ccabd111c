"""Page and block persistence."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Query, selectinload

from inkwell.models import Block, Page
from inkwell.models.mixins import utcnow
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import BlockNotFoundError, PageNotFoundError

# Never copied from an update payload: identity, placement and provenance.
PAGE_IMMUTABLE_FIELDS = frozenset({"id", "workspace_id", "created_by", "created_at", "deleted_at"})
BLOCK_IMMUTABLE_FIELDS = frozenset({"id", "page_id", "created_by", "created_at", "deleted_at"})


def _same_parent(query: Query[Any], parent_id: uuid.UUID | None) -> Query[Any]:
    if parent_id is None:
        return query.filter(Block.parent_id.is_(None))
    return query.filter(Block.parent_id == parent_id)


class PageRepository(BaseRepository):
    def _live(self) -> Query[Page]:
        return self.db.query(Page).filter(Page.deleted_at.is_(None))

    def create(self, page: Page) -> Page:
        self.db.add(page)
        self.commit()
        self.db.refresh(page)
        return page

    def get(self, page_id: uuid.UUID, with_blocks: bool = False) -> Page | None:
        query = self._live().filter(Page.id == page_id)
        if with_blocks:
            query = query.options(selectinload(Page.blocks))
        return query.first()

    def list_by_workspace(self, workspace_id: uuid.UUID) -> list[Page]:
        return (
            self._live()
            .filter(Page.workspace_id == workspace_id)
            .order_by(Page.created_at, Page.title)
            .all()
        )

    def list_children(self, parent_id: uuid.UUID) -> list[Page]:
        """Direct children only; callers assemble deeper trees."""
        return (
            self._live()
            .filter(Page.parent_id == parent_id)
            .order_by(Page.created_at, Page.title)
            .all()
        )

    def ancestor_ids(self, page_id: uuid.UUID) -> set[uuid.UUID]:
        """Ids on the parent chain starting at ``page_id`` (inclusive), tombstoned pages included."""
        seen: set[uuid.UUID] = set()
        current: uuid.UUID | None = page_id
        while current is not None and current not in seen:
            seen.add(current)
            current = self.db.query(Page.parent_id).filter(Page.id == current).scalar()
        return seen

    def update(self, page_id: uuid.UUID, changes: dict[str, Any]) -> Page:
        """Apply changes to the stored page. created_at/created_by are kept from the stored row."""
        existing = self.get(page_id)
        if existing is None:
            raise PageNotFoundError()
        created_at, created_by = existing.created_at, existing.created_by
        for field, value in changes.items():
            if field in PAGE_IMMUTABLE_FIELDS or not hasattr(Page, field):
                continue
            setattr(existing, field, value)
        existing.created_at = created_at
        existing.created_by = created_by
        self.commit()
        self.db.refresh(existing)
        return existing

    def soft_delete(self, page_id: uuid.UUID) -> None:
        page = self.get(page_id)
        if page is None:
            raise PageNotFoundError()
        page.mark_deleted()
        self.commit()

    def hard_delete(self, page_id: uuid.UUID) -> None:
        try:
            self.db.query(Block).filter(Block.page_id == page_id).delete(
                synchronize_session="fetch"
            )
            deleted = (
                self.db.query(Page).filter(Page.id == page_id).delete(synchronize_session="fetch")
            )
            if deleted == 0:
                raise PageNotFoundError()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class BlockRepository(BaseRepository):
    def _live(self) -> Query[Block]:
        return self.db.query(Block).filter(Block.deleted_at.is_(None))

    def create(self, block: Block) -> Block:
        self.db.add(block)
        self.commit()
        self.db.refresh(block)
        return block

    def get(self, block_id: uuid.UUID) -> Block | None:
        return self._live().filter(Block.id == block_id).first()

    def list_by_page(self, page_id: uuid.UUID) -> list[Block]:
        return self._live().filter(Block.page_id == page_id).order_by(Block.position).all()

    def siblings(self, page_id: uuid.UUID, parent_id: uuid.UUID | None) -> list[Block]:
        """Live blocks sharing a page and parent, in position order."""
        query = _same_parent(self._live().filter(Block.page_id == page_id), parent_id)
        return query.order_by(Block.position, Block.created_at).all()

    def max_position(self, page_id: uuid.UUID, parent_id: uuid.UUID | None) -> float | None:
        query = self.db.query(func.max(Block.position)).filter(
            Block.deleted_at.is_(None), Block.page_id == page_id
        )
        return _same_parent(query, parent_id).scalar()

    def update(self, block_id: uuid.UUID, changes: dict[str, Any]) -> Block:
        block = self.get(block_id)
        if block is None:
            raise BlockNotFoundError()
        for field, value in changes.items():
            if field in BLOCK_IMMUTABLE_FIELDS or not hasattr(Block, field):
                continue
            setattr(block, field, value)
        block.updated_at = utcnow()
        self.commit()
        self.db.refresh(block)
        return block

    def set_positions(self, positions: dict[uuid.UUID, float]) -> None:
        """Write several positions in one transaction."""
        blocks = self._live().filter(Block.id.in_(list(positions))).all()
        for block in blocks:
            block.position = positions[block.id]
        self.commit()

    def soft_delete(self, block_id: uuid.UUID) -> None:
        block = self.get(block_id)
        if block is None:
            raise BlockNotFoundError()
        block.mark_deleted()
        self.commit()
