"""
Single-flight synchronisation of external content into the knowledge base.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from pollinet_kb.rag.dedup import Deduplicator
from pollinet_kb.rag.pipeline import RAGPipeline
from pollinet_kb.sync.models import SyncOutcome, SyncResult
from pollinet_kb.sync.tweets import (
    OFFICIAL_USERNAME,
    Tweet,
    categorize_tweet,
    filter_tweets,
    format_tweet_content,
    tweet_metadata,
)
from pollinet_kb.utils.logging import get_logger

logger = get_logger(__name__)


class KnowledgeSync:
    """
    Feeds new content into a RAG pipeline, skipping what is already indexed.

    ``lock`` serialises whole sync runs. It is created and owned by the
    application so every sync trigger (scheduler, HTTP endpoint, command)
    shares it. Queries never take it.
    """

    def __init__(
        self,
        pipeline: RAGPipeline,
        deduplicator: Deduplicator,
        lock: asyncio.Lock,
        official_username: str = OFFICIAL_USERNAME,
        domain_name: str = "Pollinet"
    ):
        self.pipeline = pipeline
        self.deduplicator = deduplicator
        self.lock = lock
        self.official_username = official_username
        self.domain_name = domain_name

    @property
    def is_running(self) -> bool:
        """Whether a sync currently holds the lock."""
        return self.lock.locked()

    async def ingest_candidate(
        self,
        candidate_id: str,
        text: str,
        metadata: Optional[dict[str, str]] = None,
        document_name: Optional[str] = None
    ) -> SyncOutcome:
        """
        Ingest one candidate unless it duplicates indexed content.

        Args:
            candidate_id: External id of the candidate, searched for in similar chunks
            text: Text to ingest
            metadata: String metadata for the stored chunks
            document_name: Document name (default: ``candidate_id``)

        Returns:
            ADDED if at least one chunk was stored, SKIPPED for duplicates and blank text
        """
        if await self.deduplicator.is_duplicate(text, candidate_id):
            return SyncOutcome.SKIPPED

        stored = await self.pipeline.ingest(document_name or candidate_id, text, metadata or {})
        if stored == 0:
            logger.warning(f"Candidate {candidate_id} produced no chunks, nothing stored")
            return SyncOutcome.SKIPPED
        return SyncOutcome.ADDED

    async def run(self, fetch: Callable[[], Awaitable[list[Tweet]]]) -> SyncResult:
        """
        Fetch, filter and ingest tweets while holding the sync lock.

        Raises:
            ProviderError | StoreError: If fetching, deduplication or ingestion fails
        """
        async with self.lock:
            logger.info("Starting Twitter sync...")

            tweets = await fetch()
            logger.info(f"Fetched {len(tweets)} tweets")

            filtered = filter_tweets(tweets, self.official_username)
            logger.info(f"Filtered to {len(filtered)} relevant tweets")

            added = 0
            skipped = 0

            for tweet in filtered:
                category, category_label = categorize_tweet(tweet)
                content = format_tweet_content(
                    tweet,
                    category_label,
                    domain_name=self.domain_name,
                    official_username=self.official_username
                )

                # Stored content carries the status link, so re-fetches match by id
                if await self.deduplicator.is_duplicate(tweet.text, tweet.id):
                    skipped += 1
                    continue

                metadata = tweet_metadata(tweet, category, category_label, self.official_username)

                await self.pipeline.ingest(f"tweet_{tweet.id}", content, metadata)
                added += 1
                logger.debug(f"Added tweet {tweet.id} to category: {category_label} ({category})")

            logger.info(f"Sync complete: {added} added, {skipped} skipped")

            return SyncResult(added=added, skipped=skipped, last_sync=datetime.now(timezone.utc))
