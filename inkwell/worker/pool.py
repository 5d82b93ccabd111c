"""Bounded asyncio worker pool for background work.

A fixed number of workers consume a buffered queue (``size * 10`` slots).
Each task is a zero-argument coroutine function run under a per-task timeout;
a failing or timed-out task is logged and does not stop its worker.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[None]]

DEFAULT_TASK_TIMEOUT = 30.0
QUEUE_SLOTS_PER_WORKER = 10


class WorkerPool:
    def __init__(self, size: int, task_timeout: float = DEFAULT_TASK_TIMEOUT) -> None:
        if size < 1:
            raise ValueError("worker pool size must be at least 1")
        self.size = size
        self.task_timeout = task_timeout
        self._queue: asyncio.Queue[Task] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def running(self) -> bool:
        return bool(self._workers) and not self._closed

    def start(self) -> None:
        """Spawn the workers. Must be called from a running event loop."""
        if self._workers:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self.size * QUEUE_SLOTS_PER_WORKER)
        self._closed = False
        self._workers = [
            asyncio.create_task(self._run(index), name=f"worker-{index}")
            for index in range(self.size)
        ]
        logger.info("Worker pool started: size=%s task_timeout=%s", self.size, self.task_timeout)

    def submit(self, task: Task) -> bool:
        """Queue a task. Returns False if the pool is not running or the queue is full."""
        if self._closed or self._queue is None:
            logger.warning("Task dropped: worker pool is not running")
            return False
        try:
            self._queue.put_nowait(task)
        except asyncio.QueueFull:
            logger.warning("Task dropped: worker pool queue is full")
            return False
        return True

    def submit_threadsafe(self, task: Task, timeout: float = 5.0) -> bool:
        """Queue a task from a thread other than the pool's event loop."""
        if self._loop is None or self._closed:
            logger.warning("Task dropped: worker pool is not running")
            return False

        async def _enqueue() -> bool:
            return self.submit(task)

        future = asyncio.run_coroutine_threadsafe(_enqueue(), self._loop)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            logger.warning("Task dropped: timed out handing off to worker pool")
            return False

    async def _run(self, index: int) -> None:
        assert self._queue is not None
        while True:
            task = await self._queue.get()
            try:
                await asyncio.wait_for(task(), timeout=self.task_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Task timed out: worker=%s timeout=%s", index, self.task_timeout
                )
            except Exception:
                logger.exception("Task failed: worker=%s", index)
            finally:
                self._queue.task_done()

    async def shutdown(self) -> None:
        """Stop accepting tasks, wait for queued and in-flight ones, then stop the workers."""
        self._closed = True
        if self._queue is not None:
            await self._queue.join()
        await self._stop_workers()
        logger.info("Worker pool stopped")

    async def shutdown_with_timeout(self, timeout: float) -> bool:
        """Like shutdown() but gives up after ``timeout`` seconds.

        Returns False if draining did not finish in time; remaining work is cancelled.
        """
        self._closed = True
        try:
            if self._queue is not None:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Worker pool shutdown timed out after %ss; cancelling tasks", timeout)
            await self._stop_workers()
            return False
        await self._stop_workers()
        logger.info("Worker pool stopped")
        return True

    async def _stop_workers(self) -> None:
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
