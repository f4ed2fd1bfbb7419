"""Document and chunk data structures for RAG."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def chunk_id(document_name: str, chunk_index: int) -> str:
    """Build the stable id of a document's chunk."""
    return f"{document_name}_{chunk_index}"


class Document(BaseModel):
    """A document to be chunked, embedded and stored.

    Attributes:
        id: Document name, used as the prefix of every chunk id
        content: The full text content of the document
        metadata: String metadata copied onto every chunk (source, category, ...)
    """

    id: str
    content: str
    metadata: dict[str, str] = Field(default_factory=dict)

    def __repr__(self) -> str:
        content_preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Document(id={self.id!r}, content={content_preview!r})"


class DocumentChunk(BaseModel):
    """A chunk of a document, the unit of storage and retrieval.

    Re-ingesting the same document name produces the same chunk ids, so
    stores overwrite chunks in place instead of duplicating them.

    Attributes:
        id: ``{document_name}_{chunk_index}``
        content: The text of the chunk
        embedding: Embedding vector, required before the chunk is persisted
        metadata: Document metadata plus ``document`` and ``chunk_index``
        created_at: Set by the store on first insert, never changed afterwards
    """

    id: str
    content: str = Field(min_length=1)
    embedding: Optional[list[float]] = None
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: dict) -> dict:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    def __repr__(self) -> str:
        content_preview = self.content[:30] + "..." if len(self.content) > 30 else self.content
        return f"DocumentChunk(id={self.id!r}, content={content_preview!r})"
