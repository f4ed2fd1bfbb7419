"""Document chunking."""

from .base import BaseChunker
from .document import Document, DocumentChunk, chunk_id

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0:
        raise ValueError("Overlap must not be negative")
    if overlap >= chunk_size:
        raise ValueError("Overlap must be less than chunk_size")


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[str]:
    """Split text into fixed-size, overlapping segments.

    The text is trimmed first. A window of ``chunk_size`` characters slides
    forward by ``chunk_size - overlap`` until it reaches the end; the last
    segment is whatever text remains. Offsets count characters, not bytes.

    Args:
        text: Raw document text
        chunk_size: Maximum characters per segment
        overlap: Characters shared with the previous segment

    Returns:
        Ordered segments; empty only when the trimmed text is empty
    """
    _validate(chunk_size, overlap)

    text = text.strip()
    if not text:
        return []
    if len(text) <= chunk_size:
        return [text]

    step = chunk_size - overlap
    segments = []
    start = 0

    while True:
        end = min(start + chunk_size, len(text))
        segments.append(text[start:end])
        if end == len(text):
            break
        start += step

    return segments


class FixedSizeChunker(BaseChunker):
    """Chunk documents into fixed-size pieces with overlap.

    Chunk ids are ``{document_name}_{chunk_index}`` so re-chunking the same
    document yields the same ids.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_OVERLAP,
    ):
        """Initialize the fixed-size chunker.

        Args:
            chunk_size: Maximum characters per chunk
            overlap: Number of characters to overlap between chunks
        """
        _validate(chunk_size, overlap)

        self.chunk_size = chunk_size
        self.overlap = overlap

    def chunk(self, document: Document) -> list[DocumentChunk]:
        """Split document into fixed-size chunks."""
        return [
            DocumentChunk(
                id=chunk_id(document.id, index),
                content=segment,
                metadata={
                    **document.metadata,
                    "document": document.id,
                    "chunk_index": str(index),
                },
            )
            for index, segment in enumerate(
                chunk_text(document.content, self.chunk_size, self.overlap)
            )
        ]
