"""Search usage analytics - bounded event log with local persistence."""

import logging
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from searchclient.models.search import SearchResult
from searchclient.session.storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "searchAnalytics"
MAX_STORED_QUERY_CHARS = 100

# Checked in order; first match wins
_QUERY_CLASSES: list[tuple[str, re.Pattern[str]]] = [
    ("Implementation Question", re.compile(r"\b(how to|implement|build|create|setup|configure)\b")),
    ("Discussion Question", re.compile(r"\b(discuss|conversation|talk|said|mentioned|decided)\b")),
    ("Temporal Query", re.compile(r"\b(yesterday|today|last week|recently|latest|recent)\b")),
    ("Troubleshooting", re.compile(r"\b(error|bug|issue|problem|fix)\b")),
    ("Information Query", re.compile(r"\b(what|who|when|where|why)\b")),
]


class SearchAnalyticsEvent(BaseModel):
    """Single tracked search."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["legacy", "advanced"]
    query_type: str = Field(alias="queryType")
    result_count: int = Field(alias="resultCount")
    avg_score: float = Field(alias="avgScore")
    timestamp: str
    query: str
    has_documents: bool = Field(alias="hasDocuments")
    has_slack: bool = Field(alias="hasSlack")


class SearchStats(BaseModel):
    """Aggregate view over tracked searches."""

    total_searches: int
    advanced_searches: int
    legacy_searches: int
    avg_result_count: int
    avg_score: float
    advanced_usage_percent: int


def classify_query(query: str) -> str:
    """Bucket a query by keyword."""
    lower_query = query.lower()
    for label, pattern in _QUERY_CLASSES:
        if pattern.search(lower_query):
            return label
    return "General Query"


class SearchAnalytics:
    """Ring buffer of recent searches, mirrored to local storage.

    Storage failures are logged and otherwise ignored; analytics never break
    a search.
    """

    def __init__(self, storage: KeyValueStorage, max_events: int = 100) -> None:
        self._storage = storage
        self.max_events = max_events
        self._events: list[SearchAnalyticsEvent] = []

    @property
    def events(self) -> list[SearchAnalyticsEvent]:
        return list(self._events)

    def _persist(self) -> None:
        try:
            self._storage.set_item(
                STORAGE_KEY, [e.model_dump(by_alias=True) for e in self._events]
            )
        except OSError as e:
            logger.warning(f"Failed to store search analytics: {e}")

    def track_search(self, event: SearchAnalyticsEvent) -> None:
        """Record an event, keeping only the newest max_events."""
        self._events.append(event)
        if len(self._events) > self.max_events:
            self._events = self._events[-self.max_events :]
        self._persist()
        logger.debug("Search analytics", extra={"structured": event.model_dump()})

    def recent_searches(self, limit: int = 10) -> list[SearchAnalyticsEvent]:
        if limit <= 0:
            return []
        return self._events[-limit:]

    def search_stats(self) -> SearchStats | None:
        """Aggregate stats, or None when nothing is tracked."""
        if not self._events:
            return None

        total = len(self._events)
        advanced = sum(1 for e in self._events if e.mode == "advanced")
        legacy = sum(1 for e in self._events if e.mode == "legacy")
        avg_result_count = sum(e.result_count for e in self._events) / total
        avg_score = sum(e.avg_score for e in self._events) / total

        return SearchStats(
            total_searches=total,
            advanced_searches=advanced,
            legacy_searches=legacy,
            avg_result_count=round(avg_result_count),
            avg_score=round(avg_score, 2),
            advanced_usage_percent=round(advanced / total * 100),
        )

    def load_from_storage(self) -> None:
        """Replace in-memory events with the persisted log."""
        try:
            stored = self._storage.get_item(STORAGE_KEY)
            raw_events: list[Any] = stored if isinstance(stored, list) else []
            self._events = [SearchAnalyticsEvent.model_validate(e) for e in raw_events]
        except (OSError, ValidationError) as e:
            logger.warning(f"Failed to load search analytics: {e}")
            self._events = []
        self._events = self._events[-self.max_events :]

    def clear(self) -> None:
        self._events = []
        try:
            self._storage.remove_item(STORAGE_KEY)
        except OSError as e:
            logger.warning(f"Failed to clear search analytics: {e}")


def track_search_usage(
    analytics: SearchAnalytics,
    mode: Literal["legacy", "advanced"],
    query: str,
    results: Sequence[SearchResult],
    avg_score: float,
) -> SearchAnalyticsEvent:
    """Classify and record a completed search."""
    event = SearchAnalyticsEvent(
        mode=mode,
        query_type=classify_query(query),
        result_count=len(results),
        avg_score=avg_score,
        timestamp=datetime.now(UTC).isoformat(),
        query=query[:MAX_STORED_QUERY_CHARS],
        has_documents=any(r.source == "document" or not r.channel_id for r in results),
        has_slack=any(r.source == "slack" or bool(r.channel_id) for r in results),
    )
    analytics.track_search(event)
    return event
