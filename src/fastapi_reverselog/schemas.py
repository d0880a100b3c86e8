"""Pydantic schemas for notifications and trigger endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fastapi_reverselog.types import ReverseRequest


class NotificationPayload(BaseModel):
    """Terminal outcome sent to the requester's callback URL."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    request_id: str
    postage_code: str = ""
    tracking_code: str = ""
    status: str
    callback: str

    @classmethod
    def from_request(cls, request: ReverseRequest) -> NotificationPayload:
        return cls(
            request_id=request.request_id,
            postage_code=request.postage_code,
            tracking_code=request.tracking_code,
            status=str(request.status),
            callback=request.callback,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PollSummaryResponse(BaseModel):
    pages: int
    requests: int
    delivered: int
    failed_delivery: int
    aborted: bool


class RetrySummaryResponse(BaseModel):
    retried: int
    escalated: int
    aborted: bool


class UpdatesResponse(BaseModel):
    request_type: str
    notifications: int
