"""Background task execution."""

from inkwell.worker.pool import WorkerPool

__all__ = ["WorkerPool"]
