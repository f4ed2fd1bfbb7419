"""RAG pipeline: ingestion and the query orchestrator."""

from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from pydantic import BaseModel

from pollinet_kb.core.message import ConversationMessage
from pollinet_kb.exceptions import KnowledgeBotError, ProviderError, StoreError
from pollinet_kb.providers.base import LLMProvider
from pollinet_kb.utils.logging import get_logger

from .base import BaseChunker, BaseEmbedding, BaseRetriever, BaseVectorStore
from .chunking import FixedSizeChunker
from .document import Document
from .generator import Generator
from .prompts import APOLOGY_MESSAGE, NO_ANSWER_SENTINEL, DomainProfile
from .retriever import VectorRetriever

if TYPE_CHECKING:
    from pollinet_kb.utils.config import KnowledgeBotConfig

logger = get_logger(__name__)


class QueryState(str, Enum):
    """States of a single ``answer`` call."""
    START = "start"
    RETRIEVING = "retrieving"
    EMPTY_CONTEXT = "empty_context"
    HAS_CONTEXT = "has_context"
    GENERATING = "generating"
    ACCEPTED = "accepted"
    NEEDS_FALLBACK = "needs_fallback"
    FALLBACK_GENERATING = "fallback_generating"
    DONE = "done"


class QueryOutcome(BaseModel):
    """The answer of one query plus the states it went through."""
    answer: str
    path: list[QueryState]

    @property
    def used_fallback(self) -> bool:
        return QueryState.FALLBACK_GENERATING in self.path


class RAGPipeline:
    """Retrieval-augmented question answering over an ingested corpus.

    Ingestion: text → chunks → embeddings → upserts.
    Queries: retrieve → grounded generation → fallback generation when the
    retrieval is empty or the grounded answer is the sentinel phrase.

    The pipeline keeps no per-query state; conversation history is owned
    by the caller and only read here.

    Example:
        ```python
        pipeline = RAGPipeline(
            embedding=FakeEmbedding(),
            vectorstore=MemoryVectorStore(),
            provider=OpenAIProvider(api_key="..."),
        )
        await pipeline.ingest("overview", text, {"source": "whitepaper"})
        answer = await pipeline.answer("How does Pollinet relay transactions?", history)
        ```
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        vectorstore: BaseVectorStore,
        provider: Optional[LLMProvider] = None,
        retriever: Optional[BaseRetriever] = None,
        chunker: Optional[BaseChunker] = None,
        generator: Optional[Generator] = None,
        top_k: int = 5,
        model: str = "gpt-4o-mini",
        domain: Optional[DomainProfile] = None,
        max_conversation_history: int = 10,
        max_fallback_chunks: int = 30,
    ):
        """Initialize the RAG pipeline.

        Args:
            embedding: Embedding model for chunks and queries
            vectorstore: Vector store holding the chunks
            provider: Chat-completion provider (required unless ``generator`` is given)
            retriever: Retriever (default: VectorRetriever with ``top_k``)
            chunker: Document chunker (default: FixedSizeChunker, 1000/200)
            generator: Answer generator (default: built from ``provider``)
            top_k: Chunks retrieved per query
            model: Chat model identifier
            domain: Knowledge domain used in prompts
            max_conversation_history: History messages included in prompts
            max_fallback_chunks: Corpus chunks included in fallback prompts
        """
        self.embedding = embedding
        self.vectorstore = vectorstore
        self.retriever = retriever or VectorRetriever(embedding, vectorstore, top_k=top_k)
        self.chunker = chunker or FixedSizeChunker()

        if generator is None and provider is not None:
            generator = Generator(
                provider=provider,
                vectorstore=vectorstore,
                model=model,
                domain=domain,
                max_conversation_history=max_conversation_history,
                max_fallback_chunks=max_fallback_chunks,
            )
        self.generator = generator

    @classmethod
    def from_config(cls, config: "KnowledgeBotConfig") -> "RAGPipeline":
        """Wire OpenAI embeddings, OpenAI chat and a pgvector store from configuration."""
        from pollinet_kb.providers.openai import OpenAIProvider

        from .embeddings import OpenAIEmbedding
        from .vectorstore import PgVectorStore

        api_key = config.openai_api_key.get_secret_value()

        embedding = OpenAIEmbedding(
            model=config.embedding_model,
            api_key=api_key,
            base_url=config.openai_base_url,
            dimension=config.embedding_dimension,
        )
        vectorstore = PgVectorStore(
            config.database_url.get_secret_value(),
            table_name=config.embeddings_table,
            dimension=config.embedding_dimension,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
        )
        provider = OpenAIProvider(api_key=api_key, base_url=config.openai_base_url)
        generator = Generator(
            provider=provider,
            vectorstore=vectorstore,
            model=config.gpt_model,
            domain=DomainProfile(
                name=config.domain_name,
                description=config.domain_description,
                related_topics=config.related_topics,
            ),
            max_conversation_history=config.max_conversation_history,
            max_fallback_chunks=config.max_fallback_chunks,
            grounded_temperature=config.grounded_temperature,
            fallback_temperature=config.fallback_temperature,
            max_tokens=config.max_tokens,
        )

        return cls(
            embedding=embedding,
            vectorstore=vectorstore,
            chunker=FixedSizeChunker(config.chunk_size, config.chunk_overlap),
            generator=generator,
            top_k=config.top_k_chunks,
        )

    async def initialize(self) -> None:
        """Create the vector store schema if absent."""
        await self.vectorstore.initialize()

    async def close(self) -> None:
        """Release the vector store's connections."""
        await self.vectorstore.close()

    async def ingest(
        self,
        document_name: str,
        text: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> int:
        """Chunk, embed and upsert a document.

        Chunks that fail to embed or store are logged and skipped, so a
        partial failure shows up as a smaller count.

        Args:
            document_name: Document identifier, prefix of every chunk id
            text: Full document text
            metadata: String metadata copied onto every chunk

        Returns:
            Number of chunks stored

        Raises:
            ProviderError | StoreError: If every chunk failed
        """
        logger.info(f"Adding document: {document_name}")

        document = Document(id=document_name, content=text, metadata=metadata or {})
        chunks = self.chunker.chunk(document)
        logger.info(f"Split into {len(chunks)} chunks")

        stored = 0
        last_error: Optional[KnowledgeBotError] = None

        for chunk in chunks:
            try:
                vector = await self.embedding.embed(chunk.content)
                await self.vectorstore.upsert(chunk.model_copy(update={"embedding": vector}))
            except (ProviderError, StoreError) as e:
                logger.error(f"Failed to ingest chunk {chunk.id}: {e}")
                last_error = e
                continue
            stored += 1

        if chunks and stored == 0 and last_error is not None:
            raise last_error

        if stored < len(chunks):
            logger.warning(f"Document {document_name} partially indexed: {stored}/{len(chunks)} chunks")
        else:
            logger.info(f"Document added successfully with {stored} chunks")
        return stored

    async def retrieve(self, query: str) -> list[str]:
        """Retrieve relevant chunk contents for a query."""
        return await self.retriever.retrieve(query)

    async def answer_with_trace(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
    ) -> QueryOutcome:
        """Answer a query and report the states visited.

        Raises:
            ProviderError: If embedding or generation fails
        """
        if self.generator is None:
            raise ValueError("LLM provider required for answer() method")

        path = [QueryState.START, QueryState.RETRIEVING]

        try:
            chunks = await self.retriever.retrieve(query)
        except StoreError as e:
            logger.warning(f"Retrieval failed, treating as empty context: {e}")
            chunks = []

        if not chunks:
            logger.info("No relevant chunks found, using fallback with full knowledge base")
            path += [QueryState.EMPTY_CONTEXT, QueryState.NEEDS_FALLBACK]
        else:
            path += [QueryState.HAS_CONTEXT, QueryState.GENERATING]
            response = await self.generator.generate(query, chunks, history)

            if NO_ANSWER_SENTINEL not in response:
                path.append(QueryState.ACCEPTED)
                logger.debug(f"Query path: {' -> '.join(s.value for s in path)}")
                return QueryOutcome(answer=response, path=path)

            logger.info("Model couldn't answer from context, using fallback with full knowledge base")
            path.append(QueryState.NEEDS_FALLBACK)

        path.append(QueryState.FALLBACK_GENERATING)
        response = await self.generator.generate_fallback(query, history)
        path.append(QueryState.DONE)

        logger.debug(f"Query path: {' -> '.join(s.value for s in path)}")
        return QueryOutcome(answer=response, path=path)

    async def answer(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
    ) -> str:
        """Answer a query from the knowledge base, falling back when grounding fails.

        Args:
            query: User's question
            history: Recent conversation, oldest first (not modified)

        Returns:
            The answer text

        Raises:
            ProviderError: If embedding or generation fails
        """
        outcome = await self.answer_with_trace(query, history)
        return outcome.answer

    async def respond(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
    ) -> str:
        """Like ``answer``, but failures become the generic apology message."""
        try:
            return await self.answer(query, history)
        except KnowledgeBotError as e:
            logger.error(f"Error querying RAG system: {e}")
            return APOLOGY_MESSAGE

    async def count_chunks(self) -> int:
        """Return the number of indexed chunks."""
        return await self.vectorstore.count()
