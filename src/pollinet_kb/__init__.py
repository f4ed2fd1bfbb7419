"""
Pollinet knowledge bot - retrieval-augmented question answering over a pgvector store.
"""

from pollinet_kb.core.message import ConversationMessage, Role
from pollinet_kb.exceptions import (
    ConfigurationError,
    KnowledgeBotError,
    ProviderError,
    StoreError,
)
from pollinet_kb.memory import ConversationManager
from pollinet_kb.providers import LLMProvider, LLMResponse, OpenAIProvider
from pollinet_kb.rag import (
    # RAG Core
    Document,
    DocumentChunk,
    RAGPipeline,
    QueryOutcome,
    QueryState,
    Deduplicator,
    Generator,
    DomainProfile,
    # Embeddings
    DummyEmbedding,
    FakeEmbedding,
    OpenAIEmbedding,
    # Vector Stores
    MemoryVectorStore,
    PgVectorStore,
    # Chunking
    FixedSizeChunker,
    # Retrievers
    VectorRetriever,
)
from pollinet_kb.sync import KnowledgeSync, SyncOutcome, SyncResult, TwitterClient
from pollinet_kb.utils import KnowledgeBotConfig, get_logger, load_config, set_log_level

__version__ = "0.1.0"
__all__ = [
    # Core
    "ConversationMessage",
    "Role",
    # Errors
    "KnowledgeBotError",
    "ProviderError",
    "StoreError",
    "ConfigurationError",
    # Memory
    "ConversationManager",
    # Providers
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    # RAG
    "Document",
    "DocumentChunk",
    "RAGPipeline",
    "QueryOutcome",
    "QueryState",
    "Deduplicator",
    "Generator",
    "DomainProfile",
    "DummyEmbedding",
    "FakeEmbedding",
    "OpenAIEmbedding",
    "MemoryVectorStore",
    "PgVectorStore",
    "FixedSizeChunker",
    "VectorRetriever",
    # Sync
    "KnowledgeSync",
    "SyncOutcome",
    "SyncResult",
    "TwitterClient",
    # Utils
    "KnowledgeBotConfig",
    "load_config",
    "get_logger",
    "set_log_level",
]
