"""Base HTTP client with retry.

Shared by the webhook notifier and the remote event store client.

Retry Strategy:
- Exponential backoff: 1s, 2s, 4s, 8s, ... (capped)
- Jitter: ±50% randomization to prevent thundering herd
- Max retries: configurable, small by default (callers are interactive)
- Retryable: ConnectError, Timeout, 502, 503, 504
"""

import logging
import random
import time
from collections.abc import Callable

import httpx

logger = logging.getLogger(__name__)

# Retryable HTTP status codes (server-side transient errors)
RETRYABLE_STATUS_CODES = {502, 503, 504}


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 16.0,
) -> float:
    """Calculate delay with exponential backoff and jitter.

    Formula: min(max_delay, base_delay * 2^attempt) * random(0.5, 1.5)

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 16.0)

    Returns:
        Delay in seconds with jitter applied
    """
    delay = min(max_delay, base_delay * (2**attempt))
    jitter = random.uniform(0.5, 1.5)
    return delay * jitter


class RetryingClient:
    """JSON HTTP client with bounded retries on transient failures.

    Usage:
        with RetryingClient("https://events.example.com", token="...") as client:
            response = client.request("GET", "/events/42")
            if response is not None and response.status_code == 200:
                event = response.json()
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        log_tag: str = "HTTP",
    ):
        """Initialize client.

        Args:
            base_url: Base URL prepended to every endpoint
            token: Optional bearer token
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for transient errors
            transport: Optional httpx transport (tests use MockTransport)
            sleep: Sleep function between retries
            log_tag: Tag used in log messages
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport
        self._sleep = sleep
        self._tag = log_tag
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client with connection pooling."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(
                    max_connections=20,
                    max_keepalive_connections=5,
                ),
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        data: dict | None = None,
        params: dict | None = None,
    ) -> httpx.Response | None:
        """Make a request with retry logic.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: Endpoint path, or a full URL when base_url is empty
            data: JSON body
            params: Query parameters

        Returns:
            Response object (possibly an error status), or None if the
            server could not be reached after all retries
        """
        full_url = f"{self._base_url}{endpoint}"
        client = self._get_client()
        last_exception: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                response = client.request(
                    method.upper(),
                    full_url,
                    headers=self._headers(),
                    json=data,
                    params=params,
                )

                if response.status_code in RETRYABLE_STATUS_CODES:
                    if attempt < self._max_retries:
                        delay = calculate_backoff(attempt)
                        logger.warning(
                            "[%s] Retryable HTTP %d for %s %s, retry %d/%d after %.1fs",
                            self._tag,
                            response.status_code,
                            method,
                            endpoint,
                            attempt + 1,
                            self._max_retries,
                            delay,
                        )
                        self._sleep(delay)
                        continue
                    logger.error(
                        "[%s] Max retries exceeded for %s %s (HTTP %d)",
                        self._tag,
                        method,
                        endpoint,
                        response.status_code,
                    )

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e

                if attempt < self._max_retries:
                    delay = calculate_backoff(attempt)
                    logger.warning(
                        "[%s] Retryable error for %s %s: %s, retry %d/%d after %.1fs",
                        self._tag,
                        method,
                        endpoint,
                        type(e).__name__,
                        attempt + 1,
                        self._max_retries,
                        delay,
                    )
                    self._sleep(delay)

            except httpx.RequestError as e:
                logger.error("[%s] Request failed (non-retryable): %s", self._tag, e)
                return None

        if last_exception:
            logger.error(
                "[%s] Request failed after %d retries: %s",
                self._tag,
                self._max_retries,
                last_exception,
            )
        return None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "RetryingClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
