"""Document reconstruction from chunk-bearing search results.

Pure functions with no shared state, network or cache access. A document
hit carries an id prefixed with "doc_" and a non-empty chunk list; ids
prefixed with "doc_chunk_" are the legacy per-chunk format.
"""

from searchclient.models.docs import ChunkView, DocumentData, DocumentStats
from searchclient.models.search import DocumentChunk, SearchResult

DOCUMENT_PREFIX = "doc_"
LEGACY_CHUNK_PREFIX = "doc_chunk_"
UNTITLED_DOCUMENT = "Untitled Document"

HIGHLIGHTED_CLASS = "chunk-highlighted"
NORMAL_CLASS = "chunk-normal"


def is_legacy_chunk(result: SearchResult) -> bool:
    """True for pre-aggregation per-chunk hits."""
    return isinstance(result.id, str) and result.id.startswith(LEGACY_CHUNK_PREFIX)


def is_full_document(result: SearchResult) -> bool:
    """True for aggregated document hits carrying at least one chunk."""
    if not isinstance(result.id, str):
        return False
    if not result.id.startswith(DOCUMENT_PREFIX) or is_legacy_chunk(result):
        return False
    return bool(result.chunks)


def _sorted_chunks(result: SearchResult) -> list[DocumentChunk]:
    # sorted() is stable, so duplicate orders keep input order
    return sorted(result.chunks or [], key=lambda c: c.order)


def reconstruct(result: SearchResult) -> DocumentData | None:
    """Rebuild an ordered, highlight-aware document from a search hit.

    Args:
        result: Search hit

    Returns:
        DocumentData, or None unless the hit is a full document

    Defaults:
        - full_content: result.content, else result.text
        - document_title: metadata title, else "Untitled Document"
        - total_chunks / highlighted_count: metadata counts, else computed lengths
    """
    if not is_full_document(result):
        return None

    chunks = _sorted_chunks(result)
    highlighted = [c for c in chunks if c.is_highlighted]
    metadata = result.metadata

    total_chunks = len(chunks)
    highlighted_count = len(highlighted)
    title = UNTITLED_DOCUMENT
    file_path = None
    primary_chunk_id = None
    if metadata is not None:
        if metadata.total_chunks is not None:
            total_chunks = metadata.total_chunks
        if metadata.highlighted_chunks is not None:
            highlighted_count = metadata.highlighted_chunks
        title = metadata.document_title or UNTITLED_DOCUMENT
        file_path = metadata.file_path
        primary_chunk_id = metadata.primary_chunk_id

    return DocumentData(
        full_content=result.content if result.content is not None else result.text,
        chunks=chunks,
        highlighted_chunks=highlighted,
        primary_chunk_id=primary_chunk_id,
        document_title=title,
        file_path=file_path,
        total_chunks=total_chunks,
        highlighted_count=highlighted_count,
    )


def renderable(document: DocumentData) -> list[ChunkView]:
    """Map each chunk, in canonical order, to its view shape."""
    return [
        ChunkView(
            id=chunk.id,
            content=chunk.content,
            order=chunk.order,
            is_highlighted=chunk.is_highlighted,
            section_title=chunk.section_title,
            score=chunk.score if chunk.score is not None else 0.0,
            hierarchy_level=chunk.hierarchy_level,
            chunk_type=chunk.chunk_type,
            css_class=HIGHLIGHTED_CLASS if chunk.is_highlighted else NORMAL_CLASS,
        )
        for chunk in document.chunks
    ]


def stats(result: SearchResult) -> DocumentStats | None:
    """Section counts and identity of a document hit; None for non-documents."""
    document = reconstruct(result)
    if document is None:
        return None
    return DocumentStats(
        total_sections=document.total_chunks,
        relevant_sections=document.highlighted_count,
        title=document.document_title,
        file_path=document.file_path,
        primary_chunk_id=document.primary_chunk_id,
    )
