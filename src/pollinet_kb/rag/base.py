"""Base classes and abstract interfaces for RAG components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .document import Document, DocumentChunk


class BaseEmbedding(ABC):
    """Abstract base class for embedding models.

    Embedding models convert text into dense vector representations.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            ProviderError: If the embedding provider fails
        """
        pass

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of texts, one provider call per text.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors
        """
        return [await self.embed(text) for text in texts]

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        pass


class BaseVectorStore(ABC):
    """Abstract base class for vector stores.

    Vector stores persist chunks with their embeddings and search them
    by cosine distance.
    """

    async def initialize(self) -> None:
        """Create the storage schema if absent. Safe to call repeatedly."""

    @abstractmethod
    async def upsert(self, chunk: "DocumentChunk") -> None:
        """Insert a chunk, or overwrite content, embedding and metadata of an existing id.

        Args:
            chunk: Chunk with its embedding set

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    async def search(self, query_embedding: list[float], k: int = 5) -> list[str]:
        """Search for the chunks nearest to a vector.

        Args:
            query_embedding: Query embedding vector
            k: Maximum number of results

        Returns:
            Chunk contents ordered by ascending cosine distance
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int) -> list[str]:
        """Return up to ``limit`` chunk contents ordered by insertion time (oldest first)."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of chunks in the store."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove all chunks from the store."""
        pass

    async def close(self) -> None:
        """Release connections held by the store."""


class BaseRetriever(ABC):
    """Abstract base class for retrievers.

    Retrievers find relevant chunks for a given query.
    """

    @abstractmethod
    async def retrieve(self, query: str) -> list[str]:
        """Retrieve relevant chunk contents for a query.

        An empty list means no relevant context was found.
        """
        pass


class BaseChunker(ABC):
    """Abstract base class for document chunkers.

    Chunkers split documents into smaller pieces for indexing.
    """

    @abstractmethod
    def chunk(self, document: "Document") -> list["DocumentChunk"]:
        """Split a document into chunks.

        Args:
            document: Document to chunk

        Returns:
            List of chunks
        """
        pass
