"""Shared fixtures for fastapi-reverselog tests."""

from __future__ import annotations

from dataclasses import replace

import pytest

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.exceptions import (
    ProviderError,
    RequestNotFoundError,
    StorageError,
)
from fastapi_reverselog.filters import Search
from fastapi_reverselog.polling import StatusPoller
from fastapi_reverselog.provider import ReverseLogisticHandler
from fastapi_reverselog.retry import RetryEngine
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.status import RequestStatus
from fastapi_reverselog.tasks import TaskPool
from fastapi_reverselog.types import (
    ReverseRequest,
    TrackedObject,
    TrackingEvent,
    TrackingQuery,
    TrackingResult,
)


def delivered_event() -> TrackingEvent:
    return TrackingEvent(type="BDE", status="01", description="Delivered")


def failed_event(code: str = "04") -> TrackingEvent:
    return TrackingEvent(type="BDE", status=code, description="Refused")


def transit_event() -> TrackingEvent:
    return TrackingEvent(type="RO", status="01", description="In transit")


class InMemoryRepo:
    def __init__(self) -> None:
        self.items: dict[str, ReverseRequest] = {}
        self.searches: list[Search] = []
        self.updates: list[tuple[str, str, str]] = []
        self.fail_search = False
        self.fail_update_for: set[str] = set()

    def add(self, **kwargs) -> ReverseRequest:
        request = ReverseRequest(**kwargs)
        self.items[request.request_id] = request
        return request

    async def search(self, search: Search) -> list[ReverseRequest]:
        self.searches.append(search)
        if self.fail_search:
            raise StorageError("database unavailable")
        ordered = [self.items[key] for key in sorted(self.items)]
        return [replace(item) for item in search.apply(ordered)]

    async def update_status(
        self,
        request: ReverseRequest,
        status: str,
        reason: str = "",
        *,
        expected_status: str | None = None,
    ) -> bool:
        if request.request_id in self.fail_update_for:
            raise StorageError("update failed")
        stored = self.items.get(request.request_id)
        if stored is None:
            raise RequestNotFoundError(request.request_id)
        if expected_status is not None and stored.status != expected_status:
            return False
        stored.status = RequestStatus(status)
        stored.reason = reason
        stored.retries = request.retries
        stored.postage_code = request.postage_code
        stored.tracking_code = request.tracking_code
        self.updates.append((request.request_id, str(status), reason))
        return True


class FakeProvider(ReverseLogisticHandler):
    """Provider scripted by tests."""

    def __init__(self, repository) -> None:
        super().__init__(repository)
        self.events: dict[str, tuple[TrackingEvent, ...]] = {}
        self.extra_objects: list[TrackedObject] = []
        self.batches: list[TrackingQuery] = []
        self.reverse_calls: list[str] = []
        self.updates: dict[str, list[NotificationPayload]] = {}
        self.fail_tracking = False
        self.fail_reverse_for: set[str] = set()

    async def track_objects(self, batch: TrackingQuery) -> TrackingResult:
        self.batches.append(batch)
        if self.fail_tracking:
            raise ProviderError("tracking service down")
        objects = [
            TrackedObject(number=code, events=self.events.get(code, ()))
            for code in batch.objects
        ]
        return TrackingResult(objects=tuple(objects + self.extra_objects))

    async def follow_reverse_logistic(
        self, request_type: str
    ) -> list[NotificationPayload]:
        if request_type not in self.updates:
            raise ProviderError(f"no updates for {request_type}")
        return self.updates[request_type]

    async def request_reverse(self, request: ReverseRequest) -> str:
        self.reverse_calls.append(request.request_id)
        if request.request_id in self.fail_reverse_for:
            raise ProviderError("reverse rejected")
        return f"PC-{request.request_id}"


class RecordingNotifier:
    def __init__(self) -> None:
        self.payloads: list[NotificationPayload] = []

    async def notify(self, payload: NotificationPayload) -> bool:
        self.payloads.append(payload)
        return True


@pytest.fixture()
def config() -> ReverseLogConfig:
    return ReverseLogConfig(max_retries=3, page_size=2)


@pytest.fixture()
def repository() -> InMemoryRepo:
    return InMemoryRepo()


@pytest.fixture()
def provider(repository) -> FakeProvider:
    return FakeProvider(repository)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
async def pool():
    pool = TaskPool(max_concurrency=4)
    yield pool
    await pool.cancel_all()


@pytest.fixture()
def poller(repository, provider, notifier, pool, config) -> StatusPoller:
    return StatusPoller(
        repository=repository,
        provider=provider,
        notifier=notifier,
        pool=pool,
        config=config,
    )


@pytest.fixture()
def retry_engine(
    repository, provider, notifier, pool, config
) -> RetryEngine:
    return RetryEngine(
        repository=repository,
        provider=provider,
        notifier=notifier,
        pool=pool,
        config=config,
    )


@pytest.fixture()
async def session_factory():
    """Create an async session factory bound to an in-memory engine."""
    pytest.importorskip("aiosqlite")
    from sqlalchemy.ext.asyncio import (
        AsyncSession,
        async_sessionmaker,
        create_async_engine,
    )

    from fastapi_reverselog.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    await engine.dispose()
