"""Duplicate detection for content about to be ingested."""

from pollinet_kb.utils.logging import get_logger

from .base import BaseRetriever

logger = get_logger(__name__)

PREFIX_LENGTH = 50


class Deduplicator:
    """Decide whether a candidate is already in the knowledge base.

    A candidate is a duplicate when one of the chunks most similar to it
    contains its external id, or when both texts are longer than
    ``PREFIX_LENGTH`` characters and start with the same ``PREFIX_LENGTH``
    characters.
    """

    def __init__(self, retriever: BaseRetriever, prefix_length: int = PREFIX_LENGTH):
        self.retriever = retriever
        self.prefix_length = prefix_length

    def _matches(self, chunk: str, candidate_text: str, candidate_id: str) -> bool:
        if candidate_id and candidate_id in chunk:
            return True
        n = self.prefix_length
        return (
            len(chunk) > n
            and len(candidate_text) > n
            and chunk[:n] == candidate_text[:n]
        )

    async def is_duplicate(self, candidate_text: str, candidate_id: str) -> bool:
        """Check a candidate against its nearest chunks.

        Raises:
            ProviderError | StoreError: If retrieval fails
        """
        chunks = await self.retriever.retrieve(candidate_text)
        for chunk in chunks:
            if self._matches(chunk, candidate_text, candidate_id):
                logger.debug(f"Candidate {candidate_id} already indexed")
                return True
        return False
