"""Webhook delivery client.

Posts domain events as JSON to an external notification system. Delivery
is best effort: the caller learns whether it worked, nothing raises.
"""

import logging
from collections.abc import Callable

import httpx

from playmatch.utilities.http import RetryingClient

logger = logging.getLogger(__name__)


class WebhookClient:
    """POST JSON payloads to a single webhook URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self._url = url
        kwargs = {"sleep": sleep} if sleep else {}
        self._http = RetryingClient(
            "",
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
            log_tag="WEBHOOK",
            **kwargs,
        )

    @property
    def url(self) -> str:
        return self._url

    def send(self, payload: dict) -> bool:
        """Deliver one payload.

        Returns:
            True if the receiver answered with a 2xx status
        """
        response = self._http.request("POST", self._url, data=payload)
        if response is None:
            return False
        if not response.is_success:
            logger.warning(
                "[WEBHOOK] Delivery to %s rejected: HTTP %d", self._url, response.status_code
            )
            return False
        logger.debug("[WEBHOOK] Delivered %s to %s", payload.get("type"), self._url)
        return True

    def close(self) -> None:
        self._http.close()
