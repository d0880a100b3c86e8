"""Retry and escalation of requests whose provider operation failed."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.filters import Search
from fastapi_reverselog.protocols import (
    Notifier,
    ProviderHandler,
    RequestRepository,
)
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.status import RequestStatus
from fastapi_reverselog.tasks import TaskPool
from fastapi_reverselog.types import ReverseRequest

logger = logging.getLogger(__name__)


@dataclass
class RetrySummary:
    retried: int = 0
    escalated: int = 0
    aborted: bool = False


class RetryEngine:
    """Re-runs errored requests until they hit the retry ceiling."""

    def __init__(
        self,
        *,
        repository: RequestRepository,
        provider: ProviderHandler,
        notifier: Notifier,
        pool: TaskPool,
        config: ReverseLogConfig,
    ) -> None:
        self.repository = repository
        self.provider = provider
        self.notifier = notifier
        self.pool = pool
        self.config = config

    async def reprocess_errored(
        self, max_retries: int | None = None
    ) -> RetrySummary:
        """Retry or escalate every ``error`` request within the ceiling.

        Requests below the ceiling get one more provider attempt. Requests
        at the ceiling are not retried; their requester is notified with
        the current status instead. Work is handed to the task pool and
        this method returns without waiting for it.
        """
        ceiling = (
            self.config.max_retries if max_retries is None else max_retries
        )
        summary = RetrySummary()
        try:
            requests = await self.repository.search(
                Search.build(
                    ("retries", "<=", ceiling),
                    ("status", "=", RequestStatus.ERROR),
                )
            )
        except Exception:
            logger.exception("Searching errored requests failed")
            summary.aborted = True
            return summary

        for request in requests:
            if request.retries >= ceiling:
                self._escalate(request, ceiling)
                summary.escalated += 1
            else:
                self.pool.submit(
                    f"retry:{request.request_id}",
                    self._retry_factory(request),
                )
                summary.retried += 1

        logger.info(
            "Reprocessed errored requests: %d retried, %d escalated",
            summary.retried,
            summary.escalated,
        )
        return summary

    def _retry_factory(self, request: ReverseRequest):
        return lambda: self.provider.do_reverse_logistic(request)

    def _escalate(self, request: ReverseRequest, ceiling: int) -> None:
        logger.warning(
            "Request %s reached %d retries, notifying requester",
            request.request_id,
            request.retries,
        )
        payload = NotificationPayload.from_request(request)
        self.pool.submit(
            f"escalate:{request.request_id}",
            lambda: self._notify_and_close(request, payload, ceiling),
        )

    async def _notify_and_close(
        self,
        request: ReverseRequest,
        payload: NotificationPayload,
        ceiling: int,
    ) -> None:
        await self.notifier.notify(payload)
        # Moving past the ceiling keeps the request out of later runs.
        request.retries = ceiling + 1
        request.reason = f"Retry limit of {ceiling} reached"
        closed = await self.repository.update_status(
            request,
            request.status,
            request.reason,
            expected_status=request.status,
        )
        if not closed:
            logger.warning(
                "Request %s changed status during escalation, "
                "retry limit not stored",
                request.request_id,
            )
