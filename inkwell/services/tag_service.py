"""Tag service."""

from __future__ import annotations

import uuid

from inkwell.models import Tag
from inkwell.repositories.tag import TagRepository
from inkwell.services.errors import TagExistsError, TagNotFoundError, ValidationFailedError
from inkwell.services.pagination import Pagination


def normalize_tag_name(name: str) -> str:
    name = (name or "").strip().lower()
    if not name:
        raise ValidationFailedError("tag name is required")
    return name


class TagService:
    def __init__(self, tags: TagRepository) -> None:
        self.tags = tags

    def list_tags(self, page: Pagination) -> tuple[list[Tag], int]:
        return self.tags.list(page)

    def get_tag(self, tag_id: uuid.UUID) -> Tag:
        tag = self.tags.get(tag_id)
        if tag is None:
            raise TagNotFoundError()
        return tag

    def create_tag(self, name: str) -> Tag:
        name = normalize_tag_name(name)
        if self.tags.get_by_name(name) is not None:
            raise TagExistsError()
        return self.tags.create(name)

    def rename_tag(self, tag_id: uuid.UUID, name: str) -> Tag:
        return self.tags.rename(tag_id, normalize_tag_name(name))

    def delete_tag(self, tag_id: uuid.UUID) -> None:
        self.tags.soft_delete(tag_id)
