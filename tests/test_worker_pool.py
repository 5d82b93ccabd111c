"""Tests for the background worker pool."""

from __future__ import annotations

import asyncio
import logging

import pytest

from inkwell.worker import WorkerPool


class TestWorkerPool:
    def test_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(0)

    @pytest.mark.asyncio
    async def test_runs_submitted_tasks(self) -> None:
        pool = WorkerPool(2)
        pool.start()
        done: list[int] = []

        for i in range(5):

            async def task(i: int = i) -> None:
                done.append(i)

            assert pool.submit(task) is True

        await pool.shutdown()
        assert sorted(done) == [0, 1, 2, 3, 4]
        assert pool.running is False

    @pytest.mark.asyncio
    async def test_timed_out_task_does_not_stop_worker(self, caplog) -> None:
        pool = WorkerPool(1, task_timeout=0.05)
        pool.start()
        done: list[str] = []

        async def slow() -> None:
            await asyncio.sleep(1)

        async def quick() -> None:
            done.append("quick")

        with caplog.at_level(logging.WARNING, logger="inkwell.worker.pool"):
            pool.submit(slow)
            pool.submit(quick)
            await pool.shutdown()

        assert done == ["quick"]
        assert "Task timed out" in caplog.text

    @pytest.mark.asyncio
    async def test_failing_task_does_not_stop_worker(self, caplog) -> None:
        pool = WorkerPool(1)
        pool.start()
        done: list[str] = []

        async def boom() -> None:
            raise RuntimeError("boom")

        async def quick() -> None:
            done.append("quick")

        with caplog.at_level(logging.ERROR, logger="inkwell.worker.pool"):
            pool.submit(boom)
            pool.submit(quick)
            await pool.shutdown()

        assert done == ["quick"]
        assert "Task failed" in caplog.text

    @pytest.mark.asyncio
    async def test_full_queue_drops_task(self) -> None:
        pool = WorkerPool(1)
        pool.start()
        gate = asyncio.Event()

        async def blocked() -> None:
            await gate.wait()

        # The worker has not been scheduled yet, so nothing leaves the ten queue slots.
        accepted = [pool.submit(blocked) for _ in range(11)]

        assert accepted == [True] * 10 + [False]

        gate.set()
        await pool.shutdown()

    @pytest.mark.asyncio
    async def test_submit_after_shutdown_is_rejected(self) -> None:
        pool = WorkerPool(1)
        pool.start()
        await pool.shutdown()

        async def task() -> None:
            pass

        assert pool.submit(task) is False

    def test_submit_before_start_is_rejected(self) -> None:
        async def task() -> None:
            pass

        pool = WorkerPool(1)
        assert pool.submit(task) is False
        assert pool.submit_threadsafe(task) is False

    @pytest.mark.asyncio
    async def test_shutdown_with_timeout_cancels_slow_work(self) -> None:
        pool = WorkerPool(1, task_timeout=5)
        pool.start()
        cancelled = asyncio.Event()

        async def slow() -> None:
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        pool.submit(slow)
        await asyncio.sleep(0)

        assert await pool.shutdown_with_timeout(0.05) is False
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_shutdown_with_timeout_drains_quick_work(self) -> None:
        pool = WorkerPool(2)
        pool.start()
        done: list[int] = []

        async def task() -> None:
            done.append(1)

        pool.submit(task)
        assert await pool.shutdown_with_timeout(1.0) is True
        assert done == [1]

    @pytest.mark.asyncio
    async def test_submit_threadsafe_from_worker_thread(self) -> None:
        pool = WorkerPool(1)
        pool.start()
        ran = asyncio.Event()

        async def task() -> None:
            ran.set()

        accepted = await asyncio.to_thread(pool.submit_threadsafe, task)

        assert accepted is True
        await asyncio.wait_for(ran.wait(), timeout=1)
        await pool.shutdown()
