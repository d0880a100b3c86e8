"""Base class for tracking provider handlers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fastapi_reverselog.exceptions import InvalidTransitionError
from fastapi_reverselog.protocols import RequestRepository
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.status import (
    RequestStatus,
    ensure_transition,
    is_terminal,
)
from fastapi_reverselog.types import (
    ReverseRequest,
    TrackingQuery,
    TrackingResult,
)

logger = logging.getLogger(__name__)


class ReverseLogisticHandler(ABC):
    """Provider handler owning the retry bookkeeping of reverse requests.

    Subclasses implement the wire calls; ``do_reverse_logistic`` records
    the outcome of ``request_reverse`` on the request and in storage.
    """

    def __init__(self, repository: RequestRepository) -> None:
        self.repository = repository

    @abstractmethod
    async def track_objects(self, batch: TrackingQuery) -> TrackingResult:
        """Track the batch objects. Raise ProviderError on failure."""

    @abstractmethod
    async def follow_reverse_logistic(
        self, request_type: str
    ) -> list[NotificationPayload]:
        """Return payloads for reverse requests the provider updated."""

    @abstractmethod
    async def request_reverse(self, request: ReverseRequest) -> str:
        """Ask the provider for a reverse shipment.

        Returns the postage code it issued. Raise ProviderError on failure.
        """

    async def do_reverse_logistic(self, request: ReverseRequest) -> None:
        if is_terminal(request.status):
            raise InvalidTransitionError(
                str(request.status), str(RequestStatus.USED)
            )
        previous = request.status
        try:
            postage_code = await self.request_reverse(request)
        except Exception as exc:
            ensure_transition(request.status, RequestStatus.ERROR)
            request.retries += 1
            request.status = RequestStatus.ERROR
            request.reason = str(exc) or type(exc).__name__
            logger.warning(
                "Reverse request %s failed (attempt %d): %s",
                request.request_id,
                request.retries,
                request.reason,
            )
            await self._save(request, previous)
            raise

        ensure_transition(request.status, RequestStatus.USED)
        request.postage_code = postage_code
        request.status = RequestStatus.USED
        request.reason = ""
        if await self._save(request, previous):
            logger.info(
                "Reverse request %s accepted with postage code %s",
                request.request_id,
                postage_code,
            )

    async def _save(self, request: ReverseRequest, previous: str) -> bool:
        saved = await self.repository.update_status(
            request,
            request.status,
            request.reason,
            expected_status=previous,
        )
        if not saved:
            logger.warning(
                "Request %s changed status while reprocessing, "
                "outcome %s not stored",
                request.request_id,
                request.status,
            )
        return saved
