"""Router factory for fastapi-reverselog."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.exceptions import register_exception_handlers
from fastapi_reverselog.notifier import CallbackNotifier
from fastapi_reverselog.polling import StatusPoller
from fastapi_reverselog.protocols import (
    Notifier,
    ProviderHandler,
    RequestRepository,
)
from fastapi_reverselog.retry import RetryEngine
from fastapi_reverselog.routes.reconciliation import (
    router as reconciliation_router,
)
from fastapi_reverselog.scheduler import ReconciliationScheduler
from fastapi_reverselog.tasks import TaskPool


def create_reconciliation_router(
    *,
    config: ReverseLogConfig,
    repository: RequestRepository,
    provider: ProviderHandler,
    notifier: Notifier | None = None,
    pool: TaskPool | None = None,
) -> APIRouter:
    """Create a configured API router.

    The router lifespan starts the periodic jobs when
    ``config.scheduler_enabled`` is set and drains background tasks on
    shutdown.
    """
    actual_notifier = notifier or CallbackNotifier(
        timeout=config.notification_timeout_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        actual_pool = pool or TaskPool(
            max_concurrency=config.max_concurrent_tasks
        )
        app.state.reverselog_config = config
        app.state.reverselog_repository = repository
        app.state.reverselog_provider = provider
        app.state.reverselog_notifier = actual_notifier
        app.state.reverselog_pool = actual_pool
        register_exception_handlers(app)

        common = {
            "repository": repository,
            "provider": provider,
            "notifier": actual_notifier,
            "pool": actual_pool,
            "config": config,
        }
        scheduler = ReconciliationScheduler(
            config=config,
            poller=StatusPoller(**common),
            retry_engine=RetryEngine(**common),
            provider=provider,
            notifier=actual_notifier,
            pool=actual_pool,
        )
        app.state.reverselog_scheduler = scheduler
        if config.scheduler_enabled:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()

    router = APIRouter(lifespan=lifespan)
    router.include_router(reconciliation_router)
    return router
