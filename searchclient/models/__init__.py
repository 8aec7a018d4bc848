"""Models package - re-exports for convenience."""

from searchclient.models.docs import ChunkView, DocumentData, DocumentStats
from searchclient.models.search import (
    DocumentChunk,
    DocumentMetadata,
    LinkItem,
    LinksQuery,
    LinksResponse,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SummarizeResponse,
)
from searchclient.models.threads import ThreadMessage, ThreadResponse

__all__ = [
    # Threads
    "ThreadMessage",
    "ThreadResponse",
    # Search
    "DocumentChunk",
    "DocumentMetadata",
    "SearchResult",
    "SearchRequest",
    "SearchResponse",
    "SummarizeResponse",
    # Links
    "LinkItem",
    "LinksQuery",
    "LinksResponse",
    # Documents
    "DocumentData",
    "ChunkView",
    "DocumentStats",
]
