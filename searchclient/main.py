"""Client composition root."""

from dataclasses import dataclass
from typing import Any

from searchclient.analytics.search_analytics import SearchAnalytics
from searchclient.api.client import SearchApiClient
from searchclient.config import Settings, get_settings
from searchclient.session.gate import SessionGate
from searchclient.session.storage import JsonFileStorage, KeyValueStorage
from searchclient.stores.thread_cache import ThreadCache
from searchclient.utils.logging import StructuredRequestLogger
from searchclient.utils.metrics import PrometheusClientMetrics


@dataclass
class ClientSession:
    """Everything a UI needs for one page session."""

    api: SearchApiClient
    threads: ThreadCache
    gate: SessionGate
    analytics: SearchAnalytics

    async def aclose(self) -> None:
        await self.api.aclose()


def build_client_session(
    settings: Settings | None = None,
    *,
    storage: KeyValueStorage | None = None,
    **transport_kwargs: Any,
) -> ClientSession:
    """Wire API client, thread cache, session gate and analytics.

    Logging out clears the thread cache.

    Args:
        settings: Client settings (defaults to environment)
        storage: Local storage (defaults to a JSON file at settings.storage_path)
        **transport_kwargs: Passed to Transport (e.g. client, sleep_fn)
    """
    settings = settings or get_settings()
    storage = storage or JsonFileStorage(settings.storage_path)
    metrics = PrometheusClientMetrics()

    transport_kwargs.setdefault("metrics", metrics)
    transport_kwargs.setdefault("request_logger", StructuredRequestLogger())
    api = SearchApiClient.from_settings(settings, **transport_kwargs)
    threads = ThreadCache(api, metrics=metrics)

    gate = SessionGate(settings.auth_password, storage)
    gate.on_logout(threads.clear)
    gate.init()

    analytics = SearchAnalytics(storage, max_events=settings.analytics_max_events)
    analytics.load_from_storage()

    return ClientSession(api=api, threads=threads, gate=gate, analytics=analytics)
