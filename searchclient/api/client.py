"""Typed client for the hybrid search backend.

Every method validates its input before touching the network; failed
checks raise RequestError with status 400 and never issue a request.
"""

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from searchclient.api.errors import RequestError
from searchclient.api.transport import Transport
from searchclient.config import Settings
from searchclient.models.search import (
    LinksQuery,
    LinksResponse,
    SearchRequest,
    SearchResponse,
    SummarizeResponse,
)
from searchclient.models.threads import ThreadResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

MAX_TOP_K = 100
MAX_SUMMARIZE_IDS = 100
MAX_LINKS_LIMIT = 2000


def _parse(model: type[M], data: Any) -> M:
    """Validate a response body, reporting malformed payloads as RequestError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestError.unknown(
            f"Malformed {model.__name__}: {e.error_count()} invalid field(s)"
        ) from e


class SearchApiClient:
    """Endpoint wrappers over a Transport."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **transport_kwargs: Any) -> "SearchApiClient":
        return cls(Transport.from_settings(settings, **transport_kwargs))

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "SearchApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def search_messages(self, request: SearchRequest) -> SearchResponse:
        """Run a hybrid search.

        Args:
            request: Search request (query, topK, filters, retrieval options)

        Returns:
            SearchResponse with chat and document hits

        Raises:
            RequestError: On validation or request failure
        """
        if not request.query or not request.query.strip():
            raise RequestError.validation("Query is required")

        if request.top_k is not None and not 1 <= request.top_k <= MAX_TOP_K:
            raise RequestError.validation(f"topK must be between 1 and {MAX_TOP_K}")

        logger.info(f"[search] top_k={request.top_k}, mode={request.mode}")
        data = await self.transport.request("POST", "/api/search", request.to_body())
        return _parse(SearchResponse, data)

    async def summarize_messages(
        self, message_ids: Sequence[int | str], query: str | None = None
    ) -> SummarizeResponse:
        """Summarize a set of search results.

        Args:
            message_ids: Result identifiers to summarize (1..100)
            query: Originating query, if any

        Returns:
            SummarizeResponse with summary text
        """
        if not message_ids:
            raise RequestError.validation("At least one message ID is required")

        if len(message_ids) > MAX_SUMMARIZE_IDS:
            raise RequestError.validation(
                f"Cannot summarize more than {MAX_SUMMARIZE_IDS} messages at once"
            )

        body: dict[str, Any] = {"messageIds": list(message_ids)}
        if query:
            body["query"] = query

        data = await self.transport.request("POST", "/api/summarize", body)
        return _parse(SummarizeResponse, data)

    async def fetch_links(self, query: LinksQuery | None = None) -> LinksResponse:
        """List links shared in chat.

        Raises:
            RequestError: If limit is outside 1..2000 or offset is negative
        """
        query = query or LinksQuery()

        if query.limit is not None and not 1 <= query.limit <= MAX_LINKS_LIMIT:
            raise RequestError.validation(f"Limit must be between 1 and {MAX_LINKS_LIMIT}")

        if query.offset is not None and query.offset < 0:
            raise RequestError.validation("Offset must be non-negative")

        data = await self.transport.request("GET", "/api/links", query_params=query.to_params())
        return _parse(LinksResponse, data)

    async def fetch_thread(self, channel_id: str, root_ts: str) -> ThreadResponse:
        """Fetch a single thread, ordered by ts ascending."""
        data = await self.transport.request(
            "GET",
            "/api/thread",
            query_params={"channel_id": channel_id, "root_ts": root_ts},
        )
        return _parse(ThreadResponse, data)

    def is_configured(self) -> bool:
        """True when a token or an explicit base URL is set."""
        return bool(self.transport.token) or bool(self.transport.base_url)

    def config_summary(self) -> dict[str, Any]:
        """Configuration status, safe to display (never includes the token)."""
        return {
            "has_token": bool(self.transport.token),
            "has_base": bool(self.transport.base_url),
            "base_url": self.transport.base_url or "(using proxy)",
        }
