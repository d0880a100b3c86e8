"""Manual trigger endpoints for the reconciliation jobs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from fastapi_reverselog.dependencies import (
    get_notifier,
    get_poller,
    get_pool,
    get_provider,
    get_retry_engine,
)
from fastapi_reverselog.polling import StatusPoller
from fastapi_reverselog.retry import RetryEngine
from fastapi_reverselog.schemas import (
    PollSummaryResponse,
    RetrySummaryResponse,
    UpdatesResponse,
)
from fastapi_reverselog.tasks import TaskPool
from fastapi_reverselog.updates import (
    check_updated_reverses,
    parse_request_type,
)

router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


@router.get("/health")
async def reconciliation_health(
    pool: TaskPool = Depends(get_pool),
) -> dict[str, str | int]:
    """Healthcheck endpoint reporting background task counters."""
    stats = pool.get_stats()
    return {
        "status": "ok",
        "pending_tasks": stats["pending"],
        "total_submitted": stats["total_submitted"],
        "total_failed": stats["total_failed"],
    }


@router.post("/poll", response_model=PollSummaryResponse)
async def trigger_poll(
    offset: int = Query(default=0, ge=0),
    page_size: int | None = Query(default=None, gt=0),
    poller: StatusPoller = Depends(get_poller),
) -> PollSummaryResponse:
    """Poll the provider for every used request now."""
    summary = await poller.poll_used_requests(offset, page_size)
    return PollSummaryResponse(
        pages=summary.pages,
        requests=summary.requests,
        delivered=summary.delivered,
        failed_delivery=summary.failed_delivery,
        aborted=summary.aborted,
    )


@router.post("/retry", response_model=RetrySummaryResponse)
async def trigger_retry(
    max_retries: int | None = Query(default=None, ge=0),
    engine: RetryEngine = Depends(get_retry_engine),
) -> RetrySummaryResponse:
    """Reprocess errored requests now."""
    summary = await engine.reprocess_errored(max_retries)
    return RetrySummaryResponse(
        retried=summary.retried,
        escalated=summary.escalated,
        aborted=summary.aborted,
    )


@router.post("/updates/{request_type}", response_model=UpdatesResponse)
async def trigger_updates(
    request_type: str,
    provider=Depends(get_provider),
    notifier=Depends(get_notifier),
    pool: TaskPool = Depends(get_pool),
) -> UpdatesResponse:
    """Notify requesters of reverse requests the provider updated."""
    kind = parse_request_type(request_type)
    count = await check_updated_reverses(
        provider=provider,
        notifier=notifier,
        pool=pool,
        request_type=kind.value,
    )
    return UpdatesResponse(request_type=kind.value, notifications=count)
