"""Fake tracking provider with HTTP simulator endpoints."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from fastapi_reverselog import ReverseLogisticHandler
from fastapi_reverselog.exceptions import ProviderError
from fastapi_reverselog.schemas import NotificationPayload
from fastapi_reverselog.status import FAILED_DELIVERY_REASONS
from fastapi_reverselog.types import (
    ReverseRequest,
    TrackedObject,
    TrackingEvent,
    TrackingQuery,
    TrackingResult,
)

# --- Simulator state (in-memory, ephemeral) ---

# Events per object, most recent first.
_sim_objects: dict[str, list[TrackingEvent]] = {}
_sim_updates: dict[str, list[dict[str, Any]]] = {"C": [], "A": []}
_sim_offline: dict[str, bool] = {"tracking": False, "reverse": False}

# --- Provider implementation ---


class TrackingSimProvider(ReverseLogisticHandler):
    """Provider backed by the local tracking simulator state."""

    async def track_objects(self, batch: TrackingQuery) -> TrackingResult:
        if _sim_offline["tracking"]:
            raise ProviderError("Tracking simulator is offline")
        objects = []
        for number in batch.objects:
            events = _sim_objects.get(number)
            if events is None:
                objects.append(
                    TrackedObject(number=number, error="Unknown object")
                )
                continue
            objects.append(
                TrackedObject(number=number, events=tuple(events))
            )
        return TrackingResult(objects=tuple(objects))

    async def follow_reverse_logistic(
        self, request_type: str
    ) -> list[NotificationPayload]:
        pending = _sim_updates.get(request_type, [])
        payloads = [NotificationPayload(**entry) for entry in pending]
        pending.clear()
        return payloads

    async def request_reverse(self, request: ReverseRequest) -> str:
        if _sim_offline["reverse"]:
            raise ProviderError("Reverse simulator is offline")
        postage_code = f"PC{uuid4().hex[:9].upper()}"
        _sim_objects.setdefault(request.tracking_code, [])
        return postage_code


# --- Simulator API endpoints ---

sim_router = APIRouter(prefix="/tracking-sim", tags=["tracking-sim"])


class SimObjectResponse(BaseModel):
    number: str
    events: int


class SimUpdateRequest(BaseModel):
    request_id: str
    postage_code: str = ""
    status: str
    callback: str


@sim_router.post("/objects/{number}", response_model=SimObjectResponse)
async def sim_register_object(number: str) -> SimObjectResponse:
    """Start tracking a new object with no events."""
    _sim_objects.setdefault(number, [])
    return SimObjectResponse(number=number, events=0)


@sim_router.post(
    "/objects/{number}/deliver", response_model=SimObjectResponse
)
async def sim_deliver(number: str) -> SimObjectResponse:
    """Record a successful final delivery event."""
    events = _sim_objects.get(number)
    if events is None:
        raise HTTPException(status_code=404, detail="Unknown object")
    events.insert(
        0, TrackingEvent(type="BDE", status="01", description="Delivered")
    )
    return SimObjectResponse(number=number, events=len(events))


@sim_router.post(
    "/objects/{number}/fail/{code}", response_model=SimObjectResponse
)
async def sim_fail(number: str, code: str) -> SimObjectResponse:
    """Record a failed final delivery event with the given status code."""
    events = _sim_objects.get(number)
    if events is None:
        raise HTTPException(status_code=404, detail="Unknown object")
    if code not in FAILED_DELIVERY_REASONS:
        raise HTTPException(
            status_code=400, detail=f"Unknown failure code: {code}"
        )
    events.insert(
        0,
        TrackingEvent(
            type="BDE",
            status=code,
            description=FAILED_DELIVERY_REASONS[code],
        ),
    )
    return SimObjectResponse(number=number, events=len(events))


@sim_router.post("/updates/{request_type}")
async def sim_push_update(
    request_type: str, update: SimUpdateRequest
) -> dict[str, int]:
    """Queue an update the provider reports on its next follow-up."""
    if request_type not in _sim_updates:
        raise HTTPException(status_code=404, detail="Unknown request type")
    _sim_updates[request_type].append(update.model_dump())
    return {"queued": len(_sim_updates[request_type])}


@sim_router.post("/offline/{service}")
async def sim_toggle_offline(service: str) -> dict[str, bool]:
    """Flip a simulated outage of the tracking or reverse service."""
    if service not in _sim_offline:
        raise HTTPException(status_code=404, detail="Unknown service")
    _sim_offline[service] = not _sim_offline[service]
    return {"offline": _sim_offline[service]}
