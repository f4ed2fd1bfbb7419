"""Vector store implementations."""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from pgvector.asyncpg import register_vector
from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    Table,
    Text,
    delete,
    event,
    func,
    select,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, insert
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from pollinet_kb.exceptions import ConfigurationError, StoreError
from pollinet_kb.utils.logging import get_logger

from .base import BaseVectorStore
from .document import DocumentChunk

logger = get_logger(__name__)

# Port used by the Supabase/pgBouncer transaction pooler
POOLER_PORT = 6543


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimension")

    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


class MemoryVectorStore(BaseVectorStore):
    """In-memory vector store for testing and small datasets.

    Stores all vectors in memory and performs exact similarity search.
    Not suitable for large-scale production use.
    """

    def __init__(self) -> None:
        self._chunks: dict[str, DocumentChunk] = {}

    async def upsert(self, chunk: DocumentChunk) -> None:
        """Insert or overwrite a chunk, keeping the original insertion time."""
        if chunk.embedding is None:
            raise StoreError(f"Chunk {chunk.id!r} has no embedding")

        existing = self._chunks.get(chunk.id)
        created_at = existing.created_at if existing else datetime.now(timezone.utc)
        self._chunks[chunk.id] = chunk.model_copy(update={"created_at": created_at})

        logger.debug(f"Upserted chunk {chunk.id} into memory store")

    async def search(self, query_embedding: list[float], k: int = 5) -> list[str]:
        """Search for similar chunks using cosine similarity."""
        if not self._chunks:
            return []

        try:
            scored = [
                (cosine_similarity(query_embedding, chunk.embedding or []), chunk)
                for chunk in self._chunks.values()
            ]
        except ValueError as e:
            raise StoreError(str(e)) from e

        # Stable sort keeps insertion order among ties
        scored.sort(key=lambda item: item[0], reverse=True)

        return [chunk.content for _, chunk in scored[:k]]

    async def list_recent(self, limit: int) -> list[str]:
        """Return chunk contents oldest first."""
        return [chunk.content for chunk in list(self._chunks.values())[:limit]]

    async def get(self, id: str) -> Optional[DocumentChunk]:
        """Get a chunk by its ID."""
        return self._chunks.get(id)

    async def count(self) -> int:
        """Return the number of chunks."""
        return len(self._chunks)

    async def clear(self) -> None:
        """Clear all chunks."""
        self._chunks.clear()


def build_chunk_table(name: str, dimension: int, metadata: MetaData) -> Table:
    """Describe the chunk table and its cosine-distance ivfflat index."""
    table = Table(
        name,
        metadata,
        Column("id", Text, primary_key=True),
        Column("content", Text, nullable=False),
        Column("embedding", Vector(dimension), nullable=False),
        Column("metadata", JSONB),
        Column(
            "created_at",
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
        ),
    )
    Index(
        f"{name}_embedding_idx",
        table.c.embedding,
        postgresql_using="ivfflat",
        postgresql_with={"lists": 100},
        postgresql_ops={"embedding": "vector_cosine_ops"},
    )
    return table


def to_async_url(database_url: str) -> tuple[URL, dict[str, Any]]:
    """Turn a plain Postgres URL into an asyncpg URL plus connect arguments.

    Connection poolers (port 6543 or ``pgbouncer=true``) cannot hold
    prepared statements, so asyncpg's statement caches are switched off.
    """
    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid DATABASE_URL: {e}") from e

    if not url.drivername.startswith("postgres"):
        raise ConfigurationError(f"Unsupported database driver: {url.drivername}")

    connect_args: dict[str, Any] = {}
    uses_pooler = url.port == POOLER_PORT or url.query.get("pgbouncer") == "true"

    sslmode = url.query.get("sslmode")
    if sslmode:
        connect_args["ssl"] = sslmode

    url = url.set(drivername="postgresql+asyncpg").difference_update_query(
        ["pgbouncer", "sslmode"]
    )

    if uses_pooler:
        logger.info("Using connection pooler - disabling prepared statements")
        connect_args["statement_cache_size"] = 0
        url = url.update_query_dict({"prepared_statement_cache_size": "0"})

    return url, connect_args


class PgVectorStore(BaseVectorStore):
    """PostgreSQL + pgvector store.

    One table keyed by chunk id, searched by cosine distance through an
    ivfflat index. Connections are pooled by the SQLAlchemy async engine;
    every upsert is a single statement, so rows are written atomically.
    """

    def __init__(
        self,
        database_url: str,
        table_name: str = "document_embeddings",
        dimension: int = 1536,
        pool_size: int = 10,
        max_overflow: int = 10,
        engine: Optional[AsyncEngine] = None,
    ):
        """Initialize the pgvector store.

        Args:
            database_url: Postgres URL (``postgres://``, ``postgresql://`` or asyncpg form)
            table_name: Name of the chunk table
            dimension: Width of the embedding column
            pool_size: Connections kept in the pool
            max_overflow: Extra connections allowed under load
            engine: Pre-built engine, mostly for tests
        """
        self.table_name = table_name
        self.dimension = dimension
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self._url, self._connect_args = to_async_url(database_url)
        self._metadata = MetaData()
        self.table = build_chunk_table(table_name, dimension, self._metadata)
        self._engine = engine

    def _get_engine(self) -> AsyncEngine:
        """Get or create the pooled engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._url,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
                connect_args=self._connect_args,
            )

            @event.listens_for(self._engine.sync_engine, "connect")
            def _register_vector(dbapi_connection, connection_record):
                dbapi_connection.run_async(register_vector)

        return self._engine

    async def _create_extension(self) -> None:
        """Enable pgvector on a throwaway connection.

        Pooled connections register the vector codec on connect, which
        needs the extension to exist already.
        """
        bootstrap = create_async_engine(
            self._url,
            poolclass=NullPool,
            connect_args=self._connect_args,
        )
        try:
            async with bootstrap.begin() as conn:
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        finally:
            await bootstrap.dispose()

    async def initialize(self) -> None:
        """Create the extension, table and similarity index if absent."""
        logger.info(f"Initializing vector table {self.table_name}...")

        try:
            await self._create_extension()
            async with self._get_engine().begin() as conn:
                await conn.run_sync(self._metadata.create_all, checkfirst=True)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to initialize table {self.table_name}: {e}") from e

        logger.info("Vector table initialized successfully")

    async def upsert(self, chunk: DocumentChunk) -> None:
        """Insert or overwrite a chunk by id. ``created_at`` is never updated."""
        if chunk.embedding is None:
            raise StoreError(f"Chunk {chunk.id!r} has no embedding")

        stmt = insert(self.table).values(
            id=chunk.id,
            content=chunk.content,
            embedding=chunk.embedding,
            metadata=chunk.metadata,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.table.c.id],
            set_={
                "content": stmt.excluded.content,
                "embedding": stmt.excluded.embedding,
                "metadata": stmt.excluded["metadata"],
            },
        )

        try:
            async with self._get_engine().begin() as conn:
                await conn.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to upsert chunk {chunk.id}: {e}") from e

    async def search(self, query_embedding: list[float], k: int = 5) -> list[str]:
        """Return the contents of the ``k`` nearest chunks by cosine distance."""
        stmt = (
            select(self.table.c.content)
            .order_by(self.table.c.embedding.cosine_distance(query_embedding))
            .limit(k)
        )

        try:
            async with self._get_engine().connect() as conn:
                result = await conn.execute(stmt)
                rows = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to search for similar vectors: {e}") from e

        return list(rows)

    async def list_recent(self, limit: int) -> list[str]:
        """Return up to ``limit`` chunk contents in insertion order."""
        stmt = (
            select(self.table.c.content)
            .order_by(self.table.c.created_at.asc())
            .limit(limit)
        )

        try:
            async with self._get_engine().connect() as conn:
                result = await conn.execute(stmt)
                rows = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to list documents: {e}") from e

        return list(rows)

    async def count(self) -> int:
        """Return the number of stored chunks."""
        try:
            async with self._get_engine().connect() as conn:
                result = await conn.execute(select(func.count()).select_from(self.table))
                return int(result.scalar_one())
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to count chunks: {e}") from e

    async def clear(self) -> None:
        """Delete every chunk, keeping the table and index."""
        try:
            async with self._get_engine().begin() as conn:
                await conn.execute(delete(self.table))
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Failed to clear table {self.table_name}: {e}") from e

    async def close(self) -> None:
        """Dispose of the connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
