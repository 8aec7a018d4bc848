"""In-memory cache of conversation threads.

Entries are keyed by "{channel_id}:{thread_root_ts}". Every stored message
sequence is deduplicated by id (last occurrence wins) and sorted ascending
by numeric ts.

There is no eviction and no in-flight request coalescing: two concurrent
ensure_thread calls for the same uncached key both fetch, and the later
write wins.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from searchclient.models.threads import ThreadMessage, ThreadResponse
from searchclient.utils.metrics import ClientMetrics

logger = logging.getLogger(__name__)

ThreadKey = str

# Rows without a thread root map here; every operation on it is a no-op
EMPTY_THREAD_KEY: ThreadKey = ""


class ThreadFetcher(Protocol):
    """Anything that can load a thread from the backend."""

    async def fetch_thread(self, channel_id: str, root_ts: str) -> ThreadResponse: ...


class ThreadRow(BaseModel):
    """The three fields the cache reads from a search result or link row."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    channel_id: str | None = None
    thread_root_ts: str | None = None
    thread: list[ThreadMessage] | None = None

    @classmethod
    def from_row(cls, row: Any) -> "ThreadRow":
        """Build from a ThreadRow, a mapping, or any object with matching attributes."""
        if isinstance(row, cls):
            return row
        return cls.model_validate(row)


@dataclass
class CacheEntry:
    """Cached thread with fetch time."""

    messages: list[ThreadMessage]
    last_fetched_at: datetime


def key_of(channel_id: str | None, thread_root_ts: str | None = None) -> ThreadKey:
    """Cache key for a thread; EMPTY_THREAD_KEY when there is no thread root.

    A missing channel still yields a key, so inline threads on such rows are
    cached and returned.
    """
    if not thread_root_ts:
        return EMPTY_THREAD_KEY
    return f"{channel_id or ''}:{thread_root_ts}"


def sort_and_dedupe(messages: Iterable[ThreadMessage]) -> list[ThreadMessage]:
    """Deduplicate by id (last occurrence wins) and sort ascending by numeric ts."""
    by_id: dict[int | str, ThreadMessage] = {}
    for message in messages:
        by_id[message.id] = message
    return sorted(by_id.values(), key=lambda m: m.ts_value)


class ThreadCache:
    """Keyed store of ordered, deduplicated thread messages.

    Owns every CacheEntry for its lifetime. Create one per session and call
    clear() at session boundaries (e.g. logout).
    """

    def __init__(self, fetcher: ThreadFetcher, metrics: ClientMetrics | None = None) -> None:
        """Initialize cache.

        Args:
            fetcher: Backend used on cache miss (usually SearchApiClient)
            metrics: Metrics recorder (optional, defaults to no-op)
        """
        self._fetcher = fetcher
        self._metrics = metrics or ClientMetrics()
        self._entries: dict[ThreadKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @staticmethod
    def key_of(channel_id: str | None, thread_root_ts: str | None = None) -> ThreadKey:
        return key_of(channel_id, thread_root_ts)

    def entry(self, key: ThreadKey) -> CacheEntry | None:
        """Raw entry for a key, for inspection."""
        return self._entries.get(key)

    def _store(self, key: ThreadKey, messages: Iterable[ThreadMessage]) -> list[ThreadMessage]:
        sorted_messages = sort_and_dedupe(messages)
        self._entries[key] = CacheEntry(
            messages=sorted_messages, last_fetched_at=datetime.now(UTC)
        )
        return list(sorted_messages)

    def ingest(self, row: Any) -> None:
        """Store a thread already embedded in a row.

        No-op unless the row has both a thread root and a non-empty thread.
        Replaces any existing entry wholesale.
        """
        thread_row = ThreadRow.from_row(row)
        key = key_of(thread_row.channel_id, thread_row.thread_root_ts)
        if not key or not thread_row.thread:
            return
        self._store(key, thread_row.thread)
        logger.debug(f"[thread_cache] ingested key={key} messages={len(thread_row.thread)}")

    def get_cached(self, row: Any) -> list[ThreadMessage] | None:
        """Cached messages for the row's thread, without fetching."""
        thread_row = ThreadRow.from_row(row)
        key = key_of(thread_row.channel_id, thread_row.thread_root_ts)
        if not key:
            return None
        entry = self._entries.get(key)
        return list(entry.messages) if entry else None

    async def ensure_thread(self, row: Any) -> list[ThreadMessage]:
        """Return the row's thread, fetching it on a cache miss.

        Order of resolution: inline thread on the row (ingested, no network),
        cached entry, then a single fetch. A failed fetch propagates and
        leaves the cache untouched.

        Args:
            row: Search result, link item, mapping or ThreadRow

        Returns:
            Messages sorted ascending by ts with unique ids; [] for rows
            without a thread root
        """
        thread_row = ThreadRow.from_row(row)
        key = key_of(thread_row.channel_id, thread_row.thread_root_ts)
        if not key:
            return []

        if thread_row.thread:
            return self._store(key, thread_row.thread)

        entry = self._entries.get(key)
        if entry is not None:
            self._metrics.inc_cache_hit()
            logger.debug(f"[thread_cache] hit key={key}")
            return list(entry.messages)

        self._metrics.inc_cache_miss()
        logger.debug(f"[thread_cache] miss key={key}, fetching")
        response = await self._fetcher.fetch_thread(
            thread_row.channel_id or "", thread_row.thread_root_ts or ""
        )
        return self._store(key, response.messages)

    def replace_with_longer(self, row: Any, messages: Iterable[ThreadMessage]) -> None:
        """Overwrite the row's entry with a more complete thread."""
        thread_row = ThreadRow.from_row(row)
        key = key_of(thread_row.channel_id, thread_row.thread_root_ts)
        if not key:
            return
        self._store(key, messages)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
