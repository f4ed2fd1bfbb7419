"""Embedding model implementations."""

import hashlib
from typing import Optional

from openai import APIError, AsyncOpenAI

from pollinet_kb.exceptions import ProviderError
from pollinet_kb.providers.openai import create_openai_client, to_provider_error
from pollinet_kb.utils.logging import get_logger

from .base import BaseEmbedding

logger = get_logger(__name__)


class DummyEmbedding(BaseEmbedding):
    """A dummy embedding model for testing.

    Returns zero vectors of a specified dimension.
    """

    def __init__(self, dimension: int = 384):
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        return [0.0] * self._dimension


class FakeEmbedding(BaseEmbedding):
    """Fake embedding that generates deterministic embeddings from text.

    Useful for testing when you want predictable embeddings.
    The embedding is generated from the hash of the text, so identical
    texts map to identical vectors.
    """

    def __init__(self, dimension: int = 384, seed: int = 42):
        """Initialize the fake embedding.

        Args:
            dimension: Dimension of the embedding vectors
            seed: Seed mixed into the hash for reproducibility
        """
        self._dimension = dimension
        self.seed = seed

    @property
    def dimension(self) -> int:
        return self._dimension

    def _hash_text(self, text: str) -> list[float]:
        """Generate a deterministic embedding in [-1, 1] from the text hash."""
        values: list[float] = []
        counter = 0
        while len(values) < self._dimension:
            digest = hashlib.sha256(f"{self.seed}:{counter}:{text}".encode()).digest()
            values.extend(byte / 127.5 - 1.0 for byte in digest)
            counter += 1
        return values[: self._dimension]

    async def embed(self, text: str) -> list[float]:
        return self._hash_text(text)


class OpenAIEmbedding(BaseEmbedding):
    """OpenAI embedding model.

    One ``embeddings.create`` round trip per text, no caching or retries.
    The vector width must match the vector store's column width.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-ada-002",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimension: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize the OpenAI embedding model.

        Args:
            model: Embedding model name
            api_key: OpenAI API key (optional, uses env var if not provided)
            base_url: Optional base URL for API
            dimension: Vector width, when the model is not in MODEL_DIMENSIONS
            client: Pre-built client, mostly for tests
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self._dimension = dimension
        self._client = client

    @property
    def dimension(self) -> int:
        if self._dimension is not None:
            return self._dimension
        return self.MODEL_DIMENSIONS.get(self.model, 1536)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            self._client = create_openai_client(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def embed(self, text: str) -> list[float]:
        """Embed a single text using the OpenAI API."""
        client = self._get_client()

        try:
            response = await client.embeddings.create(
                model=self.model,
                input=text,
            )
        except APIError as e:
            raise to_provider_error(e, "embedding") from e

        data = getattr(response, "data", None)
        if not data or not getattr(data[0], "embedding", None):
            raise ProviderError(f"No embedding returned by model {self.model}")

        return list(data[0].embedding)
