"""Shutdown cleanup registry.

Resources register a closer when they are created; on shutdown the closers
run in reverse registration order. A failing closer is logged and the rest
still run.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Closer = Callable[[], Any]


class CleanupManager:
    def __init__(self) -> None:
        self._closers: list[tuple[str, Closer]] = []

    def register(self, name: str, closer: Closer) -> None:
        """Register a sync or async zero-argument closer."""
        self._closers.append((name, closer))

    def __len__(self) -> int:
        return len(self._closers)

    async def cleanup(self) -> list[Exception]:
        """Run every closer, last registered first. Returns the errors raised."""
        errors: list[Exception] = []
        while self._closers:
            name, closer = self._closers.pop()
            try:
                result = closer()
                if inspect.isawaitable(result):
                    await result
                logger.info("Closed %s", name)
            except Exception as e:
                logger.error("Cleanup of %s failed: %s", name, e)
                errors.append(e)
        return errors

    async def cleanup_with_timeout(self, timeout: float) -> list[Exception]:
        """cleanup() bounded by ``timeout`` seconds; a timeout is returned as an error."""
        try:
            return await asyncio.wait_for(self.cleanup(), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error("Cleanup timed out after %ss", timeout)
            return [e]
