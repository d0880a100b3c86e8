"""Request entity and transient tracking types."""

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi_reverselog.status import RequestStatus


@dataclass
class ReverseRequest:
    """A reverse-logistics shipment request tracked by the engine."""

    request_id: str
    postage_code: str = ""
    tracking_code: str = ""
    status: RequestStatus = RequestStatus.CREATED
    retries: int = 0
    callback: str = ""
    reason: str = ""


@dataclass(frozen=True)
class TrackingQuery:
    """One batched tracking lookup sent to the provider.

    ``mode`` "U" asks only for the most recent event of every object.
    """

    objects: tuple[str, ...]
    language: str = "101"
    mode: str = "U"
    callback: str = ""


@dataclass(frozen=True)
class TrackingEvent:
    type: str
    status: str
    description: str = ""


@dataclass(frozen=True)
class TrackedObject:
    """Tracking events of one object, most recent first."""

    number: str
    events: tuple[TrackingEvent, ...] = ()
    error: str = ""

    @property
    def latest(self) -> TrackingEvent | None:
        return self.events[0] if self.events else None


@dataclass(frozen=True)
class TrackingResult:
    objects: tuple[TrackedObject, ...] = field(default_factory=tuple)
