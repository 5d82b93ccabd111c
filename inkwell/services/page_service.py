"""Page and block service.

Pages form a tree per workspace through ``parent_id``; blocks are ordered
among siblings (same page and parent block) by a float ``position``. A block
moved between two neighbours takes the midpoint of their positions. When two
neighbours get closer than MIN_POSITION_GAP the sibling list is renumbered
to multiples of POSITION_STEP first.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from inkwell.models import Block, Page
from inkwell.repositories.page import BlockRepository, PageRepository
from inkwell.repositories.workspace import WorkspaceRepository
from inkwell.services.errors import (
    BlockNotFoundError,
    PageNotFoundError,
    ValidationFailedError,
    WorkspaceNotFoundError,
)

logger = logging.getLogger(__name__)

POSITION_STEP = 1024.0
MIN_POSITION_GAP = 1e-6


class PageService:
    def __init__(self, pages: PageRepository, workspaces: WorkspaceRepository) -> None:
        self.pages = pages
        self.workspaces = workspaces

    def create_page(
        self,
        workspace_id: uuid.UUID | None,
        title: str,
        created_by: int | None,
        parent_id: uuid.UUID | None = None,
        icon: str | None = None,
    ) -> Page:
        title = (title or "").strip()
        if not title:
            raise ValidationFailedError("page title is required")
        if workspace_id is None:
            raise ValidationFailedError("workspace ID is required")
        if not created_by:
            raise ValidationFailedError("creator information is required")
        if self.workspaces.get(workspace_id) is None:
            raise WorkspaceNotFoundError()
        if parent_id is not None:
            self._check_parent(workspace_id, parent_id)
        page = self.pages.create(
            Page(
                workspace_id=workspace_id,
                parent_id=parent_id,
                title=title,
                icon=icon,
                created_by=created_by,
            )
        )
        logger.info("Page created: id=%s workspace_id=%s", page.id, workspace_id)
        return page

    def _check_parent(self, workspace_id: uuid.UUID, parent_id: uuid.UUID) -> None:
        parent = self.pages.get(parent_id)
        if parent is None:
            raise PageNotFoundError("parent page not found")
        if parent.workspace_id != workspace_id:
            raise ValidationFailedError("parent page must belong to the same workspace")

    def get_page(self, page_id: uuid.UUID, with_blocks: bool = True) -> Page:
        page = self.pages.get(page_id, with_blocks=with_blocks)
        if page is None:
            raise PageNotFoundError()
        return page

    def list_workspace_pages(self, workspace_id: uuid.UUID) -> list[Page]:
        if self.workspaces.get(workspace_id) is None:
            raise WorkspaceNotFoundError()
        return self.pages.list_by_workspace(workspace_id)

    def list_child_pages(self, parent_id: uuid.UUID) -> list[Page]:
        return self.pages.list_children(parent_id)

    def update_page(self, page_id: uuid.UUID, changes: dict[str, Any]) -> Page:
        """Update title/icon/parent. Creator and creation time are never changed."""
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValidationFailedError("page title is required")
            changes = {**changes, "title": title}
        if changes.get("parent_id") is not None:
            if changes["parent_id"] == page_id:
                raise ValidationFailedError("a page cannot be its own parent")
            existing = self.get_page(page_id, with_blocks=False)
            self._check_parent(existing.workspace_id, changes["parent_id"])
            if page_id in self.pages.ancestor_ids(changes["parent_id"]):
                raise ValidationFailedError("a page cannot be moved under its own descendant")
        return self.pages.update(page_id, changes)

    def delete_page(self, page_id: uuid.UUID) -> None:
        self.pages.soft_delete(page_id)
        logger.info("Page soft-deleted: id=%s", page_id)

    def hard_delete_page(self, page_id: uuid.UUID) -> None:
        self.pages.hard_delete(page_id)
        logger.warning("Page hard-deleted: id=%s", page_id)


class BlockService:
    def __init__(self, blocks: BlockRepository, pages: PageRepository) -> None:
        self.blocks = blocks
        self.pages = pages

    def create_block(
        self,
        page_id: uuid.UUID,
        type: str,
        created_by: int,
        props: dict[str, Any] | None = None,
        content: Any = None,
        parent_id: uuid.UUID | None = None,
        position: float | None = None,
    ) -> Block:
        """Create a block. Without an explicit position it is appended after its last sibling."""
        if not (type or "").strip():
            raise ValidationFailedError("block type is required")
        if self.pages.get(page_id) is None:
            raise PageNotFoundError()
        if parent_id is not None:
            parent = self.blocks.get(parent_id)
            if parent is None:
                raise BlockNotFoundError("parent block not found")
            if parent.page_id != page_id:
                raise ValidationFailedError("parent block must belong to the same page")
        if position is None:
            last = self.blocks.max_position(page_id, parent_id)
            position = POSITION_STEP if last is None else last + POSITION_STEP
        return self.blocks.create(
            Block(
                page_id=page_id,
                parent_id=parent_id,
                type=type.strip(),
                props=props or {},
                content=content,
                position=position,
                created_by=created_by,
            )
        )

    def get_block(self, block_id: uuid.UUID) -> Block:
        block = self.blocks.get(block_id)
        if block is None:
            raise BlockNotFoundError()
        return block

    def list_blocks(self, page_id: uuid.UUID) -> list[Block]:
        if self.pages.get(page_id) is None:
            raise PageNotFoundError()
        return self.blocks.list_by_page(page_id)

    def update_block(self, block_id: uuid.UUID, changes: dict[str, Any]) -> Block:
        if "type" in changes and not (changes["type"] or "").strip():
            raise ValidationFailedError("block type is required")
        if "props" in changes and not isinstance(changes["props"], dict):
            raise ValidationFailedError("block props must be an object")
        return self.blocks.update(block_id, changes)

    def delete_block(self, block_id: uuid.UUID) -> None:
        self.blocks.soft_delete(block_id)

    def move_block(
        self,
        block_id: uuid.UUID,
        after_id: uuid.UUID | None = None,
        before_id: uuid.UUID | None = None,
    ) -> Block:
        """Move a block after ``after_id``, or before ``before_id``, among its siblings.

        With neither given the block moves to the end. ``after_id`` wins when
        both are given.
        """
        block = self.get_block(block_id)
        position = self._position_between(block, after_id, before_id)
        if position is None:
            self.renumber_blocks(block.page_id, block.parent_id)
            position = self._position_between(block, after_id, before_id)
        return self.blocks.update(block_id, {"position": position})

    def renumber_blocks(self, page_id: uuid.UUID, parent_id: uuid.UUID | None) -> None:
        """Respace sibling positions to POSITION_STEP, 2*POSITION_STEP, ... keeping their order."""
        siblings = self.blocks.siblings(page_id, parent_id)
        self.blocks.set_positions(
            {sibling.id: (index + 1) * POSITION_STEP for index, sibling in enumerate(siblings)}
        )
        logger.info(
            "Blocks renumbered: page_id=%s parent_id=%s count=%s",
            page_id,
            parent_id,
            len(siblings),
        )

    def _position_between(
        self,
        block: Block,
        after_id: uuid.UUID | None,
        before_id: uuid.UUID | None,
    ) -> float | None:
        """New position for ``block``, or None when the neighbours are too close."""
        siblings = [
            b for b in self.blocks.siblings(block.page_id, block.parent_id) if b.id != block.id
        ]
        ids = [b.id for b in siblings]
        lower: float | None
        upper: float | None
        if after_id is not None:
            if after_id not in ids:
                raise ValidationFailedError("after_id must be a sibling block")
            index = ids.index(after_id)
            lower = siblings[index].position
            upper = siblings[index + 1].position if index + 1 < len(siblings) else None
        elif before_id is not None:
            if before_id not in ids:
                raise ValidationFailedError("before_id must be a sibling block")
            index = ids.index(before_id)
            upper = siblings[index].position
            lower = siblings[index - 1].position if index > 0 else None
        else:
            lower = siblings[-1].position if siblings else None
            upper = None

        if lower is None and upper is None:
            return POSITION_STEP
        if lower is None:
            return upper - POSITION_STEP
        if upper is None:
            return lower + POSITION_STEP
        if upper - lower < MIN_POSITION_GAP:
            return None
        return (lower + upper) / 2
