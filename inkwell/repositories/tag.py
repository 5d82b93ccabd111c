"""Tag persistence."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy.orm import Query

from inkwell.models import Tag
from inkwell.repositories.base import BaseRepository
from inkwell.services.errors import TagExistsError, TagNotFoundError
from inkwell.services.pagination import Pagination


class TagRepository(BaseRepository):
    def _live(self) -> Query[Tag]:
        return self.db.query(Tag).filter(Tag.deleted_at.is_(None))

    def get(self, tag_id: uuid.UUID) -> Tag | None:
        return self._live().filter(Tag.id == tag_id).first()

    def get_by_name(self, name: str, include_deleted: bool = False) -> Tag | None:
        query = self.db.query(Tag) if include_deleted else self._live()
        return query.filter(Tag.name == name).first()

    def list(self, page: Pagination) -> tuple[list[Tag], int]:
        return self.paginate(self._live().order_by(Tag.name), page)

    def create(self, name: str) -> Tag:
        """Insert a tag, or revive the tombstoned tag that holds the name."""
        tag = self.get_by_name(name, include_deleted=True)
        if tag is None:
            tag = Tag(name=name)
            self.db.add(tag)
        elif tag.deleted_at is None:
            raise TagExistsError()
        else:
            tag.deleted_at = None
        self.commit(conflict=TagExistsError())
        self.db.refresh(tag)
        return tag

    def get_or_create(self, names: Iterable[str]) -> list[Tag]:
        """Resolve tag names, adding missing ones to the session without committing.

        A tombstoned tag with a requested name is revived.
        """
        wanted = sorted({n.strip().lower() for n in names if n and n.strip()})
        if not wanted:
            return []
        existing = {t.name: t for t in self.db.query(Tag).filter(Tag.name.in_(wanted)).all()}
        tags = []
        for name in wanted:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name)
                self.db.add(tag)
            elif tag.deleted_at is not None:
                tag.deleted_at = None
            tags.append(tag)
        return tags

    def rename(self, tag_id: uuid.UUID, name: str) -> Tag:
        tag = self.get(tag_id)
        if tag is None:
            raise TagNotFoundError()
        tag.name = name
        self.commit(conflict=TagExistsError())
        self.db.refresh(tag)
        return tag

    def soft_delete(self, tag_id: uuid.UUID) -> None:
        tag = self.get(tag_id)
        if tag is None:
            raise TagNotFoundError()
        tag.mark_deleted()
        self.commit()
