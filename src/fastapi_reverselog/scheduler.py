"""Periodic runner for the reconciliation entry points."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.polling import StatusPoller
from fastapi_reverselog.protocols import Notifier, ProviderHandler
from fastapi_reverselog.retry import RetryEngine
from fastapi_reverselog.status import ReverseRequestType
from fastapi_reverselog.tasks import TaskPool
from fastapi_reverselog.updates import check_updated_reverses

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


async def run_periodically(name: str, interval: float, job: Job) -> None:
    """Run ``job`` forever, sleeping ``interval`` seconds between runs."""
    logger.info("Job %s started (interval=%.1fs)", name, interval)
    while True:
        try:
            await job()
        except Exception:
            logger.exception("Job %s loop error", name)
        await asyncio.sleep(interval)


class ReconciliationScheduler:
    """Owns one asyncio loop per reconciliation job."""

    def __init__(
        self,
        *,
        config: ReverseLogConfig,
        poller: StatusPoller,
        retry_engine: RetryEngine,
        provider: ProviderHandler,
        notifier: Notifier,
        pool: TaskPool,
    ) -> None:
        self.config = config
        self.poller = poller
        self.retry_engine = retry_engine
        self.provider = provider
        self.notifier = notifier
        self.pool = pool
        self._loops: list[asyncio.Task[None]] = []

    def jobs(self) -> list[tuple[str, float, Job]]:
        jobs: list[tuple[str, float, Job]] = [
            (
                "poll-used",
                self.config.poll_interval_seconds,
                self.poller.poll_used_requests,
            ),
            (
                "reprocess-errored",
                self.config.retry_interval_seconds,
                self.retry_engine.reprocess_errored,
            ),
        ]
        for kind in ReverseRequestType:
            jobs.append(
                (
                    f"updates-{kind.value}",
                    self.config.updates_interval_seconds,
                    self._updates_job(kind),
                )
            )
        return jobs

    def _updates_job(self, kind: ReverseRequestType) -> Job:
        async def job() -> int:
            return await check_updated_reverses(
                provider=self.provider,
                notifier=self.notifier,
                pool=self.pool,
                request_type=kind.value,
            )

        return job

    @property
    def running(self) -> bool:
        return bool(self._loops)

    def start(self) -> None:
        if self._loops:
            return
        for name, interval, job in self.jobs():
            self._loops.append(
                asyncio.create_task(
                    run_periodically(name, interval, job), name=name
                )
            )

    async def stop(self) -> None:
        """Cancel the loops and drain background tasks."""
        loops, self._loops = self._loops, []
        for loop in loops:
            loop.cancel()
        await asyncio.gather(*loops, return_exceptions=True)
        remaining = await self.pool.drain(
            timeout=self.config.drain_timeout_seconds
        )
        if remaining:
            await self.pool.cancel_all()
        logger.info("Reconciliation scheduler stopped")
