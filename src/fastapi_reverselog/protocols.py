"""Collaborator protocols consumed by the reconciliation engine."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fastapi_reverselog.filters import Search
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.types import (
    ReverseRequest,
    TrackingQuery,
    TrackingResult,
)


@runtime_checkable
class RequestRepository(Protocol):
    """Storage abstraction for reverse requests."""

    async def search(self, search: Search) -> list[ReverseRequest]:
        """Return requests matching every predicate, windowed."""
        ...

    async def update_status(
        self,
        request: ReverseRequest,
        status: str,
        reason: str = "",
        *,
        expected_status: str | None = None,
    ) -> bool:
        """Persist status, reason and retries of a single request.

        With ``expected_status`` the row is only written while its stored
        status still matches; False is returned when it no longer does.
        """
        ...


@runtime_checkable
class ProviderHandler(Protocol):
    """The provider operations the engine depends on.

    Full lifecycle: do_reverse_logistic -> track_objects ->
    follow_reverse_logistic.
    """

    async def track_objects(self, batch: TrackingQuery) -> TrackingResult:
        """Track every object of the batch in a single round trip."""
        ...

    async def follow_reverse_logistic(
        self, request_type: str
    ) -> list[NotificationPayload]:
        """Return outcomes of reverse requests updated by the provider."""
        ...

    async def do_reverse_logistic(self, request: ReverseRequest) -> None:
        """Run one reverse-logistics operation, recording the outcome."""
        ...


@runtime_checkable
class Notifier(Protocol):
    async def notify(self, payload: NotificationPayload) -> bool: ...
