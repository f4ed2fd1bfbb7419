"""Retriever implementations."""

from pollinet_kb.utils.logging import get_logger

from .base import BaseEmbedding, BaseRetriever, BaseVectorStore

logger = get_logger(__name__)


class VectorRetriever(BaseRetriever):
    """Vector similarity retriever.

    Embeds the query and returns the ``top_k`` nearest chunks. Holds no
    state between calls.
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        vectorstore: BaseVectorStore,
        top_k: int = 5,
    ):
        """Initialize the vector retriever.

        Args:
            embedding: Embedding model for queries
            vectorstore: Vector store to search
            top_k: Number of chunks to return
        """
        if top_k < 1:
            raise ValueError("top_k must be at least 1")

        self.embedding = embedding
        self.vectorstore = vectorstore
        self.top_k = top_k

    async def retrieve(self, query: str) -> list[str]:
        """Retrieve chunk contents using vector similarity, nearest first."""
        logger.info(f"Retrieving relevant chunks for query: {query}")

        query_embedding = await self.embedding.embed(query)
        chunks = await self.vectorstore.search(query_embedding, self.top_k)

        logger.info(f"Retrieved {len(chunks)} relevant chunks")
        return chunks
