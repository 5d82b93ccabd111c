"""Page and block models: nested documents inside a workspace."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Float, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.session import Base
from inkwell.models.mixins import SoftDeleteMixin, TimestampMixin


class Page(TimestampMixin, SoftDeleteMixin, Base):
    """Page in a workspace, optionally nested under a parent page."""

    __tablename__ = "pages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Live blocks only, in display order.
    blocks: Mapped[list[Block]] = relationship(
        "Block",
        primaryjoin="and_(Block.page_id == Page.id, Block.deleted_at.is_(None))",
        order_by="Block.position",
        viewonly=True,
    )


class Block(TimestampMixin, SoftDeleteMixin, Base):
    """Content unit of a page, ordered among its siblings by a float position."""

    __tablename__ = "blocks"

    __table_args__ = (Index("ix_blocks_page_parent_position", "page_id", "parent_id", "position"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("blocks.id", ondelete="CASCADE"), nullable=True
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    props: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    content: Mapped[Any] = mapped_column(JSON, nullable=True)
    position: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
