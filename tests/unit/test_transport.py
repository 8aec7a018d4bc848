"""Unit tests for the retrying transport.

Tests cover:
1. Retry on transient statuses and network failures
2. Exponential backoff delays
3. Error classification (server / network / unknown)
4. Headers and body serialization
5. Metrics wiring
"""

import json
from collections.abc import Callable

import httpx
import pytest

from searchclient.api.errors import NETWORK_ERROR_MESSAGE, ErrorKind, RequestError
from searchclient.api.transport import RetryPolicy, Transport
from searchclient.utils.metrics import ClientMetrics
from tests.helpers import BASE_URL, SleepRecorder


def status_sequence(statuses: list[int], seen: list[httpx.Request]) -> Callable:
    """Handler answering with the given statuses in order."""
    remaining = iter(statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        status = next(remaining)
        if status == 200:
            return httpx.Response(200, json={"ok": True, "attempt": len(seen)})
        return httpx.Response(status, text="Service Unavailable")

    return handler


def make_transport(
    handler: Callable[[httpx.Request], httpx.Response],
    sleep: SleepRecorder,
    **kwargs: object,
) -> Transport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Transport(base_url=BASE_URL, client=client, sleep_fn=sleep, **kwargs)  # type: ignore[arg-type]


class RecordingMetrics(ClientMetrics):
    """Metrics double capturing calls."""

    def __init__(self) -> None:
        self.retries: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []
        self.latencies: list[tuple[str, str]] = []

    def record_latency(self, path: str, outcome: str, latency_ms: float) -> None:
        self.latencies.append((path, outcome))

    def inc_retry(self, path: str, reason: str) -> None:
        self.retries.append((path, reason))

    def inc_error(self, path: str, kind: str) -> None:
        self.errors.append((path, kind))


class TestRetryPolicy:
    """Test RetryPolicy delay computation."""

    def test_delay_is_pure_exponential(self) -> None:
        policy = RetryPolicy(base_delay_ms=1000)
        assert [policy.delay_for(k) for k in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_only_gateway_statuses_are_retryable(self) -> None:
        policy = RetryPolicy()
        assert all(policy.should_retry_status(s) for s in (502, 503, 504))
        assert not any(policy.should_retry_status(s) for s in (400, 401, 404, 500))


class TestRetries:
    """Test retry behavior on transient failures."""

    @pytest.mark.asyncio
    async def test_recovers_after_two_transient_failures(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        """Test that [503, 503, 200] with retries available yields the 200 body."""
        seen: list[httpx.Request] = []
        transport = make_transport(status_sequence([503, 503, 200], seen), sleep_recorder)

        result = await transport.request("GET", "/api/thread")

        assert result == {"ok": True, "attempt": 3}
        assert len(seen) == 3
        assert sleep_recorder.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_last_server_error(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        """Test that four 503s with max_retries=3 propagate a 503 RequestError."""
        seen: list[httpx.Request] = []
        transport = make_transport(
            status_sequence([503, 503, 503, 503], seen),
            sleep_recorder,
            policy=RetryPolicy(max_retries=3),
        )

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/thread")

        assert exc_info.value.status == 503
        assert exc_info.value.kind == ErrorKind.server
        assert len(seen) == 4
        assert sleep_recorder.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404, 500])
    async def test_non_transient_statuses_are_not_retried(
        self, status: int, sleep_recorder: SleepRecorder
    ) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport(status_sequence([status, 200], seen), sleep_recorder)

        with pytest.raises(RequestError) as exc_info:
            await transport.request("POST", "/api/search", {"query": "x"})

        assert exc_info.value.status == status
        assert len(seen) == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_network_failure_is_retried_then_succeeds(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            if len(attempts) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"ok": True})

        transport = make_transport(handler, sleep_recorder)

        assert await transport.request("GET", "/api/links") == {"ok": True}
        assert len(attempts) == 2
        assert sleep_recorder.delays == [1.0]

    @pytest.mark.asyncio
    async def test_persistent_network_failure_raises_network_error(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(
            handler, sleep_recorder, policy=RetryPolicy(max_retries=2, base_delay_ms=100)
        )

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/links")

        error = exc_info.value
        assert error.status == 0
        assert error.kind == ErrorKind.network
        assert error.message == NETWORK_ERROR_MESSAGE
        assert len(attempts) == 3
        assert sleep_recorder.delays == pytest.approx([0.1, 0.2])

    @pytest.mark.asyncio
    async def test_zero_retries_makes_single_attempt(self, sleep_recorder: SleepRecorder) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport(
            status_sequence([502, 200], seen), sleep_recorder, policy=RetryPolicy(max_retries=0)
        )

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/thread")

        assert exc_info.value.status == 502
        assert len(seen) == 1


class TestErrorClassification:
    """Test message extraction from error responses."""

    @pytest.mark.asyncio
    async def test_json_message_field_is_used(self, sleep_recorder: SleepRecorder) -> None:
        transport = make_transport(
            lambda r: httpx.Response(400, json={"message": "Query too long"}), sleep_recorder
        )

        with pytest.raises(RequestError) as exc_info:
            await transport.request("POST", "/api/search", {"query": "x"})

        error = exc_info.value
        assert error.message == "Query too long"
        assert error.details is not None
        assert json.loads(error.details) == {"message": "Query too long"}

    @pytest.mark.asyncio
    async def test_json_error_field_is_fallback(self, sleep_recorder: SleepRecorder) -> None:
        transport = make_transport(
            lambda r: httpx.Response(401, json={"error": "Invalid token"}), sleep_recorder
        )

        with pytest.raises(RequestError, match="Invalid token") as exc_info:
            await transport.request("GET", "/api/links")

        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_raw_text_when_body_is_not_json(self, sleep_recorder: SleepRecorder) -> None:
        transport = make_transport(
            lambda r: httpx.Response(500, text="upstream exploded"), sleep_recorder
        )

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/links")

        assert exc_info.value.message == "upstream exploded"
        assert exc_info.value.details == "upstream exploded"

    @pytest.mark.asyncio
    async def test_status_phrase_when_body_is_empty(self, sleep_recorder: SleepRecorder) -> None:
        transport = make_transport(lambda r: httpx.Response(404), sleep_recorder)

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/thread")

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Not Found"

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_unknown_error(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("handler crashed")

        transport = make_transport(handler, sleep_recorder)

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/thread")

        assert exc_info.value.status == 0
        assert exc_info.value.kind == ErrorKind.unknown
        assert exc_info.value.message == "handler crashed"
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_invalid_json_success_body_is_unknown_error(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        transport = make_transport(lambda r: httpx.Response(200, text="<html>"), sleep_recorder)

        with pytest.raises(RequestError) as exc_info:
            await transport.request("GET", "/api/thread")

        assert exc_info.value.kind == ErrorKind.unknown
        assert exc_info.value.status == 0


class TestRequestShape:
    """Test headers, body and URL construction."""

    @pytest.mark.asyncio
    async def test_post_sets_json_body_and_bearer_token(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        transport = make_transport(handler, sleep_recorder, token="secret")
        await transport.request("POST", "/api/search", {"query": "deploy", "topK": 5})

        request = seen[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"query": "deploy", "topK": 5}

    @pytest.mark.asyncio
    async def test_get_without_token_has_no_auth_or_content_type(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        transport = make_transport(handler, sleep_recorder)
        await transport.request(
            "GET", "/api/links", query_params={"channel_id": "C1", "user_id": None, "limit": 10}
        )

        request = seen[0]
        assert "Authorization" not in request.headers
        assert "Content-Type" not in request.headers
        assert request.url.path == "/api/links"
        assert dict(request.url.params) == {"channel_id": "C1", "limit": "10"}

    @pytest.mark.asyncio
    async def test_retried_request_is_identical(self, sleep_recorder: SleepRecorder) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport(status_sequence([504, 200], seen), sleep_recorder, token="t")

        await transport.request("POST", "/api/summarize", {"messageIds": [1, 2]})

        assert seen[0].content == seen[1].content
        assert seen[0].url == seen[1].url
        assert seen[1].headers["Authorization"] == "Bearer t"


class TestMetricsWiring:
    """Test that retries and terminal errors reach the metrics interface."""

    @pytest.mark.asyncio
    async def test_retries_and_errors_are_counted(self, sleep_recorder: SleepRecorder) -> None:
        metrics = RecordingMetrics()
        seen: list[httpx.Request] = []
        transport = make_transport(
            status_sequence([503, 502, 400], seen), sleep_recorder, metrics=metrics
        )

        with pytest.raises(RequestError):
            await transport.request("GET", "/api/thread")

        assert metrics.retries == [("/api/thread", "503"), ("/api/thread", "502")]
        assert metrics.errors == [("/api/thread", "server")]
        assert [outcome for _, outcome in metrics.latencies] == ["http_error"] * 3
