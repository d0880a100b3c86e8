"""Status polling and transition engine for requests awaiting delivery."""

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
from fastapi_reverselog.status import (
    DELIVERED_STATUS_CODES,
    FAILED_DELIVERY_REASONS,
    FINAL_DELIVERY_EVENT_TYPES,
    RequestStatus,
)
from fastapi_reverselog.tasks import TaskPool
from fastapi_reverselog.types import (
    ReverseRequest,
    TrackedObject,
    TrackingQuery,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    status: RequestStatus
    reason: str


@dataclass
class PollSummary:
    pages: int = 0
    requests: int = 0
    delivered: int = 0
    failed_delivery: int = 0
    aborted: bool = False


def classify(tracked: TrackedObject) -> Transition | None:
    """Decide the transition implied by the latest event of an object."""
    latest = tracked.latest
    if latest is None:
        return None
    if (
        latest.type in FINAL_DELIVERY_EVENT_TYPES
        and latest.status in DELIVERED_STATUS_CODES
    ):
        return Transition(RequestStatus.DELIVERED, latest.description)
    reason = FAILED_DELIVERY_REASONS.get(latest.status)
    if reason is not None:
        return Transition(RequestStatus.FAILED_DELIVERY, reason)
    return None


class StatusPoller:
    """Moves ``used`` requests to a terminal state as events arrive."""

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

    async def poll_used_requests(
        self, offset: int = 0, page_size: int | None = None
    ) -> PollSummary:
        """Poll every ``used`` request, one provider batch per page.

        The next window starts after the requests of the current page that
        are still ``used``; rows that transitioned no longer match the
        filter and would otherwise shift the window past unseen rows.
        """
        size = self.config.page_size if page_size is None else page_size
        if size <= 0:
            raise ValueError("page_size must be positive")

        summary = PollSummary()
        while True:
            try:
                page = await self.repository.search(
                    Search.build(
                        ("status", "=", RequestStatus.USED),
                        offset=offset,
                        limit=size,
                    )
                )
            except Exception:
                logger.exception(
                    "Searching used requests failed at offset %d", offset
                )
                summary.aborted = True
                break

            if not page:
                break

            summary.pages += 1
            summary.requests += len(page)
            try:
                transitioned = await self._process_page(page, summary)
            except Exception:
                logger.exception(
                    "Processing page at offset %d aborted", offset
                )
                summary.aborted = True
                break

            if len(page) < size:
                break
            offset += size - transitioned

        logger.info(
            "Polled %d used request(s) in %d page(s): "
            "%d delivered, %d failed delivery",
            summary.requests,
            summary.pages,
            summary.delivered,
            summary.failed_delivery,
        )
        return summary

    async def _process_page(
        self, page: list[ReverseRequest], summary: PollSummary
    ) -> int:
        """Track one page and return how many rows left ``used``."""
        by_code: dict[str, list[ReverseRequest]] = {}
        for request in page:
            if not request.tracking_code:
                logger.warning(
                    "Request %s has no tracking code, skipping",
                    request.request_id,
                )
                continue
            by_code.setdefault(request.tracking_code, []).append(request)

        if not by_code:
            return 0

        batch = TrackingQuery(
            objects=tuple(by_code),
            language=self.config.tracking_language,
            mode=self.config.tracking_mode,
            callback=self.config.tracking_callback,
        )
        result = await self.provider.track_objects(batch)

        left_used = 0
        for tracked in result.objects:
            requests = by_code.pop(tracked.number, None)
            if requests is None:
                logger.debug(
                    "Ignoring tracking result for unknown object %s",
                    tracked.number,
                )
                continue
            transition = classify(tracked)
            if transition is None:
                continue

            for request in requests:
                # A lost race also means the row is no longer ``used``.
                left_used += 1
                if not await self._apply(request, transition):
                    continue
                if transition.status is RequestStatus.DELIVERED:
                    summary.delivered += 1
                else:
                    summary.failed_delivery += 1
        return left_used

    async def _apply(
        self, request: ReverseRequest, transition: Transition
    ) -> bool:
        request.status = transition.status
        request.reason = transition.reason
        request.retries = 0
        applied = await self.repository.update_status(
            request,
            transition.status,
            transition.reason,
            expected_status=RequestStatus.USED,
        )
        if not applied:
            logger.warning(
                "Request %s left used before it could move to %s, skipping",
                request.request_id,
                transition.status,
            )
            return False
        logger.info(
            "Request %s (%s) moved to %s",
            request.request_id,
            request.tracking_code,
            transition.status,
        )

        payload = NotificationPayload.from_request(request)
        self.pool.submit(
            f"notify:{request.request_id}",
            lambda: self.notifier.notify(payload),
        )
        return True
