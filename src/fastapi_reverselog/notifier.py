"""Best-effort delivery of terminal outcomes to requester callbacks."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import httpx

from fastapi_reverselog.schemas import NotificationPayload

logger = logging.getLogger(__name__)

CALLBACK_HEADERS = {
    "Content-Type": "application/json; charset=UTF-8",
    "Connection": "close",
}


def tls_verify_for(url: str) -> bool:
    """Certificate verification is always on for https callbacks.

    Plain http callbacks never negotiate TLS, so the flag is irrelevant
    for them and stays off.
    """
    return urlsplit(url).scheme.lower() == "https"


class CallbackNotifier:
    """POSTs a notification payload once, never retrying.

    A fresh client is opened for every call and closed afterwards.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    async def notify(self, payload: NotificationPayload) -> bool:
        """Deliver ``payload`` to its callback URL.

        Returns True when the callback answered, False when the call
        could not be made. Failures are logged and dropped.
        """
        scheme = urlsplit(payload.callback).scheme.lower()
        if scheme not in ("http", "https"):
            logger.warning(
                "Request %s has no usable callback URL %r, "
                "notification dropped",
                payload.request_id,
                payload.callback,
            )
            return False

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                verify=tls_verify_for(payload.callback),
                transport=self._transport,
            ) as client:
                response = await client.post(
                    payload.callback,
                    content=payload.to_json(),
                    headers=CALLBACK_HEADERS,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(
                "Notification for request %s to %s failed: %s",
                payload.request_id,
                payload.callback,
                exc,
            )
            return False

        if response.is_success:
            logger.info(
                "Notified %s of request %s status %s",
                payload.callback,
                payload.request_id,
                payload.status,
            )
        else:
            logger.warning(
                "Callback %s answered %d for request %s",
                payload.callback,
                response.status_code,
                payload.request_id,
            )
        return True
