"""Follow-up of reverse requests the provider reports as updated."""

from __future__ import annotations

import logging

from fastapi_reverselog.exceptions import InvalidRequestTypeError
from fastapi_reverselog.protocols import Notifier, ProviderHandler
from fastapi_reverselog.status import ReverseRequestType
from fastapi_reverselog.tasks import TaskPool

logger = logging.getLogger(__name__)


def parse_request_type(value: str) -> ReverseRequestType:
    try:
        return ReverseRequestType(value.upper())
    except ValueError as e:
        raise InvalidRequestTypeError(
            f"Unknown reverse request type {value!r}"
        ) from e


async def check_updated_reverses(
    *,
    provider: ProviderHandler,
    notifier: Notifier,
    pool: TaskPool,
    request_type: str,
) -> int:
    """Notify requesters of every update the provider reports.

    Returns the number of notifications submitted.
    """
    kind = parse_request_type(request_type)
    try:
        payloads = await provider.follow_reverse_logistic(kind.value)
    except Exception:
        logger.exception("Following %s reverse requests failed", kind.name)
        return 0

    for payload in payloads:
        pool.submit(
            f"notify:{payload.request_id}",
            lambda p=payload: notifier.notify(p),
        )

    if payloads:
        logger.info(
            "Submitted %d %s update notification(s)",
            len(payloads),
            kind.name,
        )
    return len(payloads)
