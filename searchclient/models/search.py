"""Search, summarize and links wire models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from searchclient.models.threads import ThreadMessage


class DocumentChunk(BaseModel):
    """Scored sub-span of a document.

    `order` values are unique within one document and define its canonical
    sequence; `is_highlighted` marks chunks relevant to the query.
    """

    model_config = ConfigDict(extra="allow")

    id: int | str
    order: int
    content: str = ""
    is_highlighted: bool = False
    section_title: str | None = None
    hierarchy_level: int | None = None
    chunk_type: str | None = None
    score: float | None = None


class DocumentMetadata(BaseModel):
    """Aggregate metadata attached to a document hit."""

    model_config = ConfigDict(extra="allow")

    document_title: str | None = None
    file_path: str | None = None
    total_chunks: int | None = None
    highlighted_chunks: int | None = None
    primary_chunk_id: int | str | None = None


class SearchResult(BaseModel):
    """Search hit: a flat chat message or a document aggregate."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    source: Literal["slack", "document"] | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    user_id: str | None = None
    ts: str | None = None
    text: str = ""
    content: str | None = None
    author: str | None = None
    score: float = 0.0

    # Thread fields
    thread_ts: str | None = None
    parent_ts: str | None = None
    is_reply: bool | None = None
    thread_root_ts: str | None = None
    in_thread: bool | None = None
    thread: list[ThreadMessage] | None = None

    # Document fields
    chunks: list[DocumentChunk] | None = None
    metadata: DocumentMetadata | None = None


class SearchRequest(BaseModel):
    """Body of POST /api/search."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    top_k: int | None = Field(default=None, alias="topK")
    channels: list[str] | None = None
    date_from: str | None = Field(default=None, alias="dateFrom")
    date_to: str | None = Field(default=None, alias="dateTo")
    include_threads: bool | None = Field(default=None, alias="includeThreads")

    # Advanced retrieval options
    mode: Literal["legacy", "advanced"] | None = None
    include_documents: bool | None = Field(default=None, alias="includeDocuments")
    include_slack: bool | None = Field(default=None, alias="includeSlack")
    rerank: bool | None = None

    def to_body(self) -> dict[str, object]:
        """Wire body with camelCase keys and unset options omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchResponse(BaseModel):
    """Response of POST /api/search."""

    model_config = ConfigDict(extra="allow")

    ok: bool = True
    results: list[SearchResult] = []


class SummarizeResponse(BaseModel):
    """Response of POST /api/summarize."""

    model_config = ConfigDict(extra="allow")

    ok: bool = True
    summary: str = ""


class LinksQuery(BaseModel):
    """Query parameters of GET /api/links."""

    model_config = ConfigDict(populate_by_name=True)

    channel_id: str | None = None
    user_id: str | None = None
    date_from: str | None = Field(default=None, alias="dateFrom")
    date_to: str | None = Field(default=None, alias="dateTo")
    limit: int | None = None
    offset: int | None = None
    include_threads: bool | None = Field(default=None, alias="includeThreads")

    def to_params(self) -> dict[str, object | None]:
        return self.model_dump(by_alias=True)


class LinkItem(BaseModel):
    """Single link extracted from a chat message."""

    model_config = ConfigDict(extra="allow")

    message_id: int
    channel_id: str
    channel_name: str | None = None
    user_id: str | None = None
    author: str = ""
    ts: str
    url: str

    thread_ts: str | None = None
    parent_ts: str | None = None
    thread_root_ts: str | None = None
    in_thread: bool | None = None
    thread: list[ThreadMessage] | None = None


class LinksResponse(BaseModel):
    """Response of GET /api/links."""

    model_config = ConfigDict(extra="allow")

    ok: bool = True
    links: list[LinkItem] = []
