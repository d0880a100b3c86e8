"""Request status lifecycle and tracking event classification tables."""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType

from fastapi_reverselog.exceptions import InvalidTransitionError


class RequestStatus(StrEnum):
    CREATED = "created"
    USED = "used"
    DELIVERED = "delivered"
    FAILED_DELIVERY = "failed_delivery"
    ERROR = "error"


class ReverseRequestType(StrEnum):
    """Kinds of reverse request the provider reports updates for."""

    COLLECT = "C"
    POSTAGE = "A"


TERMINAL_STATUSES = frozenset(
    {RequestStatus.DELIVERED, RequestStatus.FAILED_DELIVERY}
)

ALLOWED_TRANSITIONS = MappingProxyType(
    {
        RequestStatus.CREATED: frozenset(
            {RequestStatus.USED, RequestStatus.ERROR}
        ),
        RequestStatus.USED: frozenset(
            {
                RequestStatus.DELIVERED,
                RequestStatus.FAILED_DELIVERY,
                RequestStatus.ERROR,
            }
        ),
        RequestStatus.ERROR: frozenset(
            {
                RequestStatus.USED,
                RequestStatus.ERROR,
                RequestStatus.DELIVERED,
                RequestStatus.FAILED_DELIVERY,
            }
        ),
        RequestStatus.DELIVERED: frozenset(),
        RequestStatus.FAILED_DELIVERY: frozenset(),
    }
)

# Event types reported once an object reached its final delivery step.
FINAL_DELIVERY_EVENT_TYPES = frozenset({"BDE", "BDI", "BDR"})

DELIVERED_STATUS_CODES = frozenset({"01"})

FAILED_DELIVERY_REASONS = MappingProxyType(
    {
        "02": "Recipient absent",
        "03": "Object not collected by the recipient",
        "04": "Recipient refused the object",
        "05": "Recipient unknown",
        "06": "Recipient unknown at the address",
        "07": "Address incorrect or insufficient",
        "08": "Object delivered to a wrong address and returned",
        "09": "Object lost",
        "10": "Recipient moved",
        "12": "Object stolen",
    }
)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, new: str) -> bool:
    try:
        allowed = ALLOWED_TRANSITIONS[RequestStatus(current)]
    except ValueError:
        return False
    return new in allowed


def ensure_transition(current: str, new: str) -> None:
    """Raise InvalidTransitionError unless ``current → new`` is allowed."""
    if not can_transition(current, new):
        raise InvalidTransitionError(str(current), str(new))
