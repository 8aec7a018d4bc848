"""Derived document view models."""

from typing import Literal

from pydantic import BaseModel

from searchclient.models.search import DocumentChunk


class DocumentData(BaseModel):
    """Document reconstructed from a chunk-bearing search result.

    Always derived fresh from a SearchResult; never cached.
    """

    full_content: str
    chunks: list[DocumentChunk]  # sorted by order
    highlighted_chunks: list[DocumentChunk]  # is_highlighted subset, order preserved
    primary_chunk_id: int | str | None = None
    document_title: str
    file_path: str | None = None
    total_chunks: int
    highlighted_count: int


class ChunkView(BaseModel):
    """View-level shape of a single chunk."""

    id: int | str
    content: str
    order: int
    is_highlighted: bool
    section_title: str | None = None
    score: float
    hierarchy_level: int | None = None
    chunk_type: str | None = None
    css_class: Literal["chunk-highlighted", "chunk-normal"]


class DocumentStats(BaseModel):
    """Summary counts for a document hit."""

    total_sections: int
    relevant_sections: int
    title: str
    file_path: str | None = None
    primary_chunk_id: int | str | None = None
