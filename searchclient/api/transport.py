"""HTTP transport with bounded retries and a single error shape.

Behavior:
- Bearer credential attached when a token is configured
- Transient statuses (502/503/504) and connection failures retried
- Pure exponential backoff: delay before retry k is base_delay * 2**k
- Every terminal failure surfaces as RequestError
"""

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from searchclient.api.errors import RequestError
from searchclient.api.query import to_query
from searchclient.config import Settings
from searchclient.utils.logging import RequestLogger
from searchclient.utils.metrics import ClientMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for backend requests."""

    max_retries: int = 3
    base_delay_ms: int = 1000
    retryable_statuses: frozenset[int] = frozenset({502, 503, 504})

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds before retry number `attempt` (0-based)."""
        return self.base_delay_ms * (2**attempt) / 1000

    def should_retry_status(self, status: int) -> bool:
        return status in self.retryable_statuses


def _extract_error_message(text: str, reason_phrase: str) -> str:
    """Pick the most useful message from an error response body.

    Order: JSON `message`, JSON `error`, raw text, HTTP reason phrase.
    """
    fallback = text or reason_phrase
    try:
        payload = json.loads(text)
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        for field in ("message", "error"):
            value = payload.get(field)
            if value:
                return str(value)
    return fallback


class Transport:
    """Async transport for the search backend."""

    def __init__(
        self,
        base_url: str = "",
        token: str | None = None,
        policy: RetryPolicy | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        metrics: ClientMetrics | None = None,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            base_url: Backend base URL; "" means same-origin/proxied paths
            token: Bearer credential (optional)
            policy: Retry policy (defaults to 3 retries, 1s base delay)
            client: Optional httpx client (for testing with mocks)
            timeout: Timeout for a transport-owned client, in seconds
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
            metrics: Metrics recorder (optional, defaults to no-op)
            request_logger: Attempt logger (optional, defaults to no-op)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.policy = policy or RetryPolicy()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._sleep = sleep_fn or asyncio.sleep
        self._metrics = metrics or ClientMetrics()
        self._logger = request_logger or RequestLogger()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Transport":
        """Build a transport from client settings."""
        policy = RetryPolicy(
            max_retries=settings.max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
        )
        return cls(
            base_url=settings.api_base,
            token=settings.api_token,
            policy=policy,
            timeout=settings.request_timeout_s,
            **kwargs,
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _headers(self, method: str) -> dict[str, str]:
        headers: dict[str, str] = {}
        if method == "POST":
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _send_with_retry(
        self, method: str, url: str, path: str, content: bytes | None
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Returns the last response obtained (which may be a non-transient or
        retry-exhausted error response). Raises httpx.TransportError when the
        final attempt obtained no response.
        """
        headers = self._headers(method)
        attempt = 0
        while True:
            attempt_start = time.monotonic()
            try:
                response = await self._client.request(
                    method, url, content=content, headers=headers
                )
            except httpx.TransportError as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                self._metrics.record_latency(path, "network_error", elapsed_ms)
                self._logger.log_attempt(
                    method,
                    path,
                    attempt + 1,
                    "network_error",
                    elapsed_ms,
                    error_kind=type(e).__name__,
                )
                if attempt >= self.policy.max_retries:
                    raise
                self._metrics.inc_retry(path, "network_error")
                await self._sleep(self.policy.delay_for(attempt))
                attempt += 1
                continue

            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            outcome = "success" if response.is_success else "http_error"
            self._metrics.record_latency(path, outcome, elapsed_ms)
            self._logger.log_attempt(
                method, path, attempt + 1, outcome, elapsed_ms, status=response.status_code
            )

            if (
                not response.is_success
                and self.policy.should_retry_status(response.status_code)
                and attempt < self.policy.max_retries
            ):
                self._metrics.inc_retry(path, str(response.status_code))
                await self._sleep(self.policy.delay_for(attempt))
                attempt += 1
                continue

            return response

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        query_params: Mapping[str, object | None] | None = None,
    ) -> Any:
        """Perform a request and return the decoded JSON body.

        Args:
            method: HTTP method ("GET" or "POST")
            path: Endpoint path, e.g. "/api/search"
            body: JSON-serializable request body (POST only)
            query_params: Optional query parameters; empty values are dropped

        Returns:
            Decoded JSON response

        Raises:
            RequestError: On any terminal failure
        """
        method = method.upper()
        query = to_query(query_params) if query_params else ""
        url = f"{self.base_url}{path}{query}"

        try:
            content = None
            if method == "POST" and body is not None:
                content = json.dumps(body).encode("utf-8")

            response = await self._send_with_retry(method, url, path, content)

            if not response.is_success:
                try:
                    text = response.text
                except (UnicodeDecodeError, LookupError):
                    text = ""
                message = _extract_error_message(text, response.reason_phrase)
                raise RequestError.server(response.status_code, message, text)

            return response.json()

        except RequestError as e:
            self._metrics.inc_error(path, e.kind.value)
            raise
        except httpx.TransportError:
            error = RequestError.network()
            self._metrics.inc_error(path, error.kind.value)
            logger.warning(f"[{method} {path}] no response after retries")
            raise error from None
        except Exception as e:
            error = RequestError.unknown(str(e) or type(e).__name__)
            self._metrics.inc_error(path, error.kind.value)
            logger.error(f"[{method} {path}] unexpected failure: {e}", exc_info=True)
            raise error from e
