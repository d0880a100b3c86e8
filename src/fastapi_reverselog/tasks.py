"""Bounded pool for fire-and-forget background work.

Engines submit notifications and single-request retries here instead of
awaiting them. Every task records its outcome, and ``drain`` lets the
host wait for in-flight work before shutting down.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome:
    name: str
    ok: bool
    error: str = ""


class TaskPool:
    """Runs submitted coroutines with bounded concurrency.

    Usage:
        pool = TaskPool(max_concurrency=10)
        pool.submit("notify:r-1", lambda: notifier.notify(payload))
        await pool.drain(timeout=10)
    """

    def __init__(
        self, max_concurrency: int = 10, history_size: int = 1000
    ) -> None:
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        self._sem = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task[None]] = set()
        self._outcomes: deque[TaskOutcome] = deque(maxlen=history_size)
        self._total_submitted = 0
        self._total_failed = 0

    def submit(
        self,
        name: str,
        coro_factory: Callable[[], Awaitable[Any]],
    ) -> asyncio.Task[None]:
        """Schedule work on the running loop and return immediately."""
        task = asyncio.create_task(self._run(name, coro_factory), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._total_submitted += 1
        return task

    async def _run(
        self,
        name: str,
        coro_factory: Callable[[], Awaitable[Any]],
    ) -> None:
        async with self._sem:
            try:
                await coro_factory()
            except asyncio.CancelledError:
                self._record(TaskOutcome(name, ok=False, error="cancelled"))
                raise
            except Exception as exc:
                logger.exception("Background task %s failed", name)
                self._total_failed += 1
                self._record(TaskOutcome(name, ok=False, error=str(exc)))
            else:
                self._record(TaskOutcome(name, ok=True))

    def _record(self, outcome: TaskOutcome) -> None:
        self._outcomes.append(outcome)

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for in-flight tasks.

        Returns how many tasks were still pending when ``timeout`` expired.
        """
        pending = set(self._tasks)
        if not pending:
            return 0
        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        if still_pending:
            logger.warning(
                "Task pool drain timed out with %d task(s) pending",
                len(still_pending),
            )
        return len(still_pending)

    async def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def outcomes(self) -> list[TaskOutcome]:
        return list(self._outcomes)

    def get_stats(self) -> dict[str, int]:
        return {
            "pending": self.pending,
            "total_submitted": self._total_submitted,
            "total_failed": self._total_failed,
        }
