"""Prometheus metrics for client requests and the thread cache."""

from prometheus_client import Counter, Histogram

# Request metrics
request_latency_ms = Histogram(
    "search_client_request_latency_ms",
    "Backend request latency in milliseconds, per attempt",
    ["path", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

request_retries_total = Counter(
    "search_client_request_retries_total",
    "Total retried backend requests",
    ["path", "reason"],
)

request_errors_total = Counter(
    "search_client_request_errors_total",
    "Total terminal request errors",
    ["path", "kind"],
)

# Thread cache metrics
thread_cache_hits_total = Counter(
    "search_client_thread_cache_hits_total",
    "Total thread cache hits",
)

thread_cache_misses_total = Counter(
    "search_client_thread_cache_misses_total",
    "Total thread cache misses that triggered a fetch",
)


class ClientMetrics:
    """Interface for client metrics (no-op default)."""

    def record_latency(self, path: str, outcome: str, latency_ms: float) -> None:
        """Record a single attempt's latency."""
        pass

    def inc_retry(self, path: str, reason: str) -> None:
        """Increment retry counter."""
        pass

    def inc_error(self, path: str, kind: str) -> None:
        """Increment terminal error counter."""
        pass

    def inc_cache_hit(self) -> None:
        """Increment thread cache hit counter."""
        pass

    def inc_cache_miss(self) -> None:
        """Increment thread cache miss counter."""
        pass


class PrometheusClientMetrics(ClientMetrics):
    """Prometheus-based client metrics implementation."""

    def record_latency(self, path: str, outcome: str, latency_ms: float) -> None:
        request_latency_ms.labels(path=path, outcome=outcome).observe(latency_ms)

    def inc_retry(self, path: str, reason: str) -> None:
        request_retries_total.labels(path=path, reason=reason).inc()

    def inc_error(self, path: str, kind: str) -> None:
        request_errors_total.labels(path=path, kind=kind).inc()

    def inc_cache_hit(self) -> None:
        thread_cache_hits_total.inc()

    def inc_cache_miss(self) -> None:
        thread_cache_misses_total.inc()
