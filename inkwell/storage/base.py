"""Object storage interface."""

from __future__ import annotations

from typing import BinaryIO, Protocol


class ObjectStorage(Protocol):
    def save(self, path: str, stream: BinaryIO, content_type: str | None = None) -> str:
        """Store ``stream`` at ``path`` and return its public URL."""
        ...

    def get(self, path: str) -> bytes:
        """Return the object's bytes. Raises NotFoundError if absent."""
        ...

    def delete(self, path: str) -> None:
        ...
