"""Reconciliation trigger route tests."""

from __future__ import annotations

from conftest import delivered_event, failed_event
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fastapi_reverselog.config import ReverseLogConfig
from fastapi_reverselog.exceptions import register_exception_handlers
from fastapi_reverselog.router import create_reconciliation_router
from fastapi_reverselog.routes.reconciliation import router
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.status import RequestStatus


def _create_client(repository, provider, notifier, **config):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_reconciliation_router(
            config=ReverseLogConfig(page_size=2, **config),
            repository=repository,
            provider=provider,
            notifier=notifier,
        )
    )
    return TestClient(app)


def test_health_route_exists() -> None:
    paths = {route.path for route in router.routes}
    assert "/reconciliation/health" in paths


def test_health(repository, provider, notifier) -> None:
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.get("/reconciliation/health")

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "pending_tasks": 0,
        "total_submitted": 0,
        "total_failed": 0,
    }


def test_health_counts_background_tasks(
    repository, provider, notifier
) -> None:
    repository.add(
        request_id="r-1", tracking_code="T1", status=RequestStatus.USED
    )
    provider.events = {"T1": (delivered_event(),)}
    client = _create_client(repository, provider, notifier)

    with client:
        client.post("/reconciliation/poll")
        resp = client.get("/reconciliation/health")

    assert resp.json()["total_submitted"] == 1
    assert resp.json()["total_failed"] == 0


def test_poll_reports_transitions(repository, provider, notifier) -> None:
    for request_id, code in (("r-1", "T1"), ("r-2", "T2"), ("r-3", "T3")):
        repository.add(
            request_id=request_id,
            tracking_code=code,
            status=RequestStatus.USED,
            callback=f"https://shop.example/{request_id}",
        )
    provider.events = {"T1": (delivered_event(),), "T2": (failed_event(),)}
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.post("/reconciliation/poll")

        assert resp.status_code == 200
        body = resp.json()
        assert body["delivered"] == 1
        assert body["failed_delivery"] == 1
        assert body["requests"] == 3
        assert body["aborted"] is False

    assert repository.items["r-1"].status is RequestStatus.DELIVERED
    assert repository.items["r-3"].status is RequestStatus.USED
    assert sorted(p.request_id for p in notifier.payloads) == ["r-1", "r-2"]


def test_poll_rejects_invalid_page_size(
    repository, provider, notifier
) -> None:
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.post("/reconciliation/poll", params={"page_size": 0})

    assert resp.status_code == 422


def test_retry_escalates_and_retries(repository, provider, notifier) -> None:
    repository.add(
        request_id="r-1",
        status=RequestStatus.ERROR,
        retries=1,
        callback="https://shop.example/r-1",
    )
    repository.add(
        request_id="r-2",
        status=RequestStatus.ERROR,
        retries=1,
        callback="https://shop.example/r-2",
    )
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.post(
            "/reconciliation/retry", params={"max_retries": 1}
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "retried": 0,
            "escalated": 2,
            "aborted": False,
        }

    assert provider.reverse_calls == []
    assert len(notifier.payloads) == 2


def test_retry_uses_configured_ceiling(
    repository, provider, notifier
) -> None:
    repository.add(
        request_id="r-1",
        status=RequestStatus.ERROR,
        retries=1,
        callback="https://shop.example/r-1",
    )
    client = _create_client(repository, provider, notifier, max_retries=3)

    with client:
        resp = client.post("/reconciliation/retry")

        assert resp.json()["retried"] == 1

    assert provider.reverse_calls == ["r-1"]
    assert repository.items["r-1"].status is RequestStatus.USED


def test_updates_notifies_requesters(
    repository, provider, notifier
) -> None:
    provider.updates["C"] = [
        NotificationPayload(
            request_id="r-9",
            status="used",
            callback="https://shop.example/r-9",
        )
    ]
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.post("/reconciliation/updates/c")

        assert resp.status_code == 200
        assert resp.json() == {"request_type": "C", "notifications": 1}

    assert [p.request_id for p in notifier.payloads] == ["r-9"]


def test_updates_rejects_unknown_type(
    repository, provider, notifier
) -> None:
    client = _create_client(repository, provider, notifier)

    with client:
        resp = client.post("/reconciliation/updates/X")

    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_request_type"
