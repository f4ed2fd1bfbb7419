"""RAG (Retrieval-Augmented Generation) core of the knowledge bot.

This module provides:
- Document and chunk data structures
- Embedding providers (OpenAI, fake)
- Vector stores (in-memory, PostgreSQL + pgvector)
- Fixed-size chunking
- Vector retrieval
- Grounded and fallback answer generation
- The query orchestrator and ingestion deduplicator

Example:
    ```python
    from pollinet_kb.rag import RAGPipeline
    from pollinet_kb.utils import load_config

    pipeline = RAGPipeline.from_config(load_config())
    await pipeline.initialize()

    await pipeline.ingest("overview", text, {"source": "whitepaper"})
    answer = await pipeline.answer("What is Pollinet?")
    ```
"""

# Data structures
from .document import Document, DocumentChunk, chunk_id

# Base classes
from .base import (
    BaseEmbedding,
    BaseVectorStore,
    BaseRetriever,
    BaseChunker,
)

# Embedding providers
from .embeddings import (
    DummyEmbedding,
    FakeEmbedding,
    OpenAIEmbedding,
)

# Vector stores
from .vectorstore import (
    MemoryVectorStore,
    PgVectorStore,
    cosine_similarity,
)

# Chunking
from .chunking import FixedSizeChunker, chunk_text

# Retrieval
from .retriever import VectorRetriever

# Generation
from .prompts import APOLOGY_MESSAGE, NO_ANSWER_SENTINEL, DomainProfile
from .generator import Generator

# Pipeline
from .pipeline import QueryOutcome, QueryState, RAGPipeline
from .dedup import Deduplicator

__all__ = [
    # Data structures
    "Document",
    "DocumentChunk",
    "chunk_id",
    # Base classes
    "BaseEmbedding",
    "BaseVectorStore",
    "BaseRetriever",
    "BaseChunker",
    # Embeddings
    "DummyEmbedding",
    "FakeEmbedding",
    "OpenAIEmbedding",
    # Vector stores
    "MemoryVectorStore",
    "PgVectorStore",
    "cosine_similarity",
    # Chunking
    "FixedSizeChunker",
    "chunk_text",
    # Retrieval
    "VectorRetriever",
    # Generation
    "APOLOGY_MESSAGE",
    "NO_ANSWER_SENTINEL",
    "DomainProfile",
    "Generator",
    # Pipeline
    "QueryOutcome",
    "QueryState",
    "RAGPipeline",
    "Deduplicator",
]
