"""Tests for tweet synchronisation."""

import asyncio
import json
import time

import httpx
import pytest

from pollinet_kb.exceptions import ProviderError
from pollinet_kb.rag import Deduplicator, RAGPipeline
from pollinet_kb.sync import (
    KnowledgeSync,
    SyncOutcome,
    Tweet,
    TweetAuthor,
    TweetMetrics,
    TwitterClient,
    categorize_tweet,
    filter_tweets,
    format_tweet_content,
    tweet_metadata,
)

OFFICIAL = TweetAuthor(id="42", username="sol_pollinet", name="Pollinet")
FAN = TweetAuthor(id="7", username="solana_fan", name="Fan")

LONG_TEXT = "Introducing offline Solana payments over BLE mesh networks with Pollinet SDK v1!"


def make_tweet(id="1", text=LONG_TEXT, author=OFFICIAL, likes=0, retweets=0, created_at=None):
    return Tweet(
        id=id,
        text=text,
        created_at=created_at,
        public_metrics=TweetMetrics(like_count=likes, retweet_count=retweets),
        author=author,
    )


@pytest.fixture
def sync(embedding, store):
    pipeline = RAGPipeline(embedding, store)
    return KnowledgeSync(pipeline, Deduplicator(pipeline.retriever), asyncio.Lock())


class TestTweetHelpers:
    """Tests for filtering, categorising and formatting tweets."""

    def test_filter_drops_retweets_and_short(self):
        """Retweets and short texts are removed."""
        tweets = [
            make_tweet(id="1"),
            make_tweet(id="2", text="RT @someone " + LONG_TEXT),
            make_tweet(id="3", text="gm"),
        ]

        assert [t.id for t in filter_tweets(tweets)] == ["1"]

    def test_filter_engagement_for_others(self):
        """Non-official tweets need at least 10 likes."""
        tweets = [
            make_tweet(id="1", author=FAN, likes=9),
            make_tweet(id="2", author=FAN, likes=10),
            make_tweet(id="3", author=None, likes=0),
            make_tweet(id="4", author=OFFICIAL, likes=0),
        ]

        assert [t.id for t in filter_tweets(tweets)] == ["2", "4"]

    @pytest.mark.parametrize("text,expected", [
        ("We're excited to share our roadmap", ("pollinet_announcement", "Announcement")),
        ("Changelog for the new version is live", ("pollinet_updates", "Update")),
        ("Breaking: Pollinet featured in a report", ("pollinet_news", "News")),
        ("Join our webinar on offline payments", ("pollinet_talks", "Talk/Event")),
        ("Partnership with a wallet provider", ("pollinet_partnerships", "Partnership")),
        ("New tutorial: how to relay transactions", ("pollinet_information", "Information/Guide")),
        ("Mesh networks are neat", ("pollinet_information", "Information")),
    ])
    def test_categorize(self, text, expected):
        """Keywords map to categories, first match wins."""
        assert categorize_tweet(make_tweet(text=text)) == expected

    def test_format_content(self):
        """Formatted tweets carry header, body, source, date and engagement."""
        tweet = make_tweet(likes=25, retweets=3, created_at="2025-03-14T15:09:26.000Z")

        content = format_tweet_content(tweet, "Announcement")

        assert content.startswith("📢 Pollinet Announcement: \n\n" + LONG_TEXT + "\n\n---\n")
        assert "Source: @sol_pollinet (Official Pollinet Account)\n" in content
        assert "Date: March 14, 2025 at 03:09 PM UTC\n" in content
        assert "Engagement: 25 likes, 3 retweets\n" in content
        assert "Link: https://x.com/sol_pollinet/status/1\n" in content
        assert content.endswith("---\n")

    def test_format_content_without_extras(self):
        """Missing dates and zero engagement are left out."""
        content = format_tweet_content(make_tweet(), "Information")

        assert "Date:" not in content
        assert "Engagement:" not in content

    def test_metadata(self):
        """Metadata records source, category, author, dates and counters."""
        tweet = make_tweet(id="99", likes=25, retweets=3, created_at="2025-03-14T15:09:26.000Z")

        metadata = tweet_metadata(tweet, "pollinet_announcement", "Announcement")

        assert metadata == {
            "source": "twitter",
            "category": "pollinet_announcement",
            "category_label": "Announcement",
            "tweet_id": "99",
            "author": "sol_pollinet",
            "created_at": "2025-03-14T15:09:26.000Z",
            "date_formatted": "March 14, 2025",
            "likes": "25",
            "retweets": "3",
        }

    def test_metadata_defaults_author(self):
        """Tweets without an expanded author are attributed to the official account."""
        metadata = tweet_metadata(make_tweet(author=None), "pollinet_information", "Information")

        assert metadata["author"] == "sol_pollinet"


class TestKnowledgeSync:
    """Tests for the single-flight sync service."""

    @pytest.mark.asyncio
    async def test_ingest_candidate(self, sync, store):
        """New candidates are added, repeats are skipped."""
        text = "Pollinet lets phones relay Solana transactions without internet access."

        first = await sync.ingest_candidate("1001", text, {"source": "manual"})
        second = await sync.ingest_candidate("1001", text, {"source": "manual"})

        assert first == SyncOutcome.ADDED
        assert second == SyncOutcome.SKIPPED
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_run(self, sync, store):
        """A run filters, deduplicates and ingests tweets."""
        tweets = [
            make_tweet(id="1869000000000000001", likes=5),
            make_tweet(id="1869000000000000002", text="RT @x " + LONG_TEXT),
            make_tweet(
                id="1869000000000000003",
                text="Our next conference talk covers BLE relays and offline signing.",
            ),
        ]

        async def fetch():
            return tweets

        result = await sync.run(fetch)

        assert result.added == 2
        assert result.skipped == 0
        chunk = await store.get("tweet_1869000000000000001_0")
        assert chunk.metadata["source"] == "twitter"
        assert chunk.metadata["category"] == "pollinet_announcement"
        assert chunk.metadata["tweet_id"] == "1869000000000000001"
        assert chunk.content.startswith("📢 Pollinet Announcement:")
        assert "https://x.com/sol_pollinet/status/1869000000000000001" in chunk.content

        again = await sync.run(fetch)
        assert again.added == 0
        assert again.skipped == 2

    @pytest.mark.asyncio
    async def test_run_keeps_tweets_sharing_an_opening(self, sync, store):
        """Distinct tweets with the same opening phrase are both ingested."""
        tweets = [
            make_tweet(
                id="1869000000000000011",
                text="We're excited to share that Pollinet now supports Android devices!",
            ),
            make_tweet(
                id="1869000000000000012",
                text="We're excited to share our partnership roadmap for hardware wallets in Q3.",
            ),
        ]

        async def fetch():
            return tweets

        result = await sync.run(fetch)

        assert result.added == 2
        assert result.skipped == 0
        assert await store.get("tweet_1869000000000000012_0") is not None

    @pytest.mark.asyncio
    async def test_run_adds_unrelated_tweet_to_populated_store(self, sync, store):
        """A new tweet on another topic is not mistaken for an indexed one."""
        async def first_batch():
            return [make_tweet(id="1869000000000000021")]

        async def second_batch():
            return [
                make_tweet(id="1869000000000000021"),
                make_tweet(
                    id="1869000000000000022",
                    text="Join our webinar next week on running a gateway node for offline payments.",
                ),
            ]

        await sync.run(first_batch)
        result = await sync.run(second_batch)

        assert result.added == 1
        assert result.skipped == 1
        assert await store.get("tweet_1869000000000000022_0") is not None

    @pytest.mark.asyncio
    async def test_ingest_candidate_blank_text(self, sync, store):
        """Candidates that store no chunks are reported as skipped."""
        outcome = await sync.ingest_candidate("1869000000000000031", "   ")

        assert outcome == SyncOutcome.SKIPPED
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_is_running(self, sync):
        """The lock is held for the whole run."""
        seen = []

        async def fetch():
            seen.append(sync.is_running)
            return []

        assert not sync.is_running
        await sync.run(fetch)

        assert seen == [True]
        assert not sync.is_running

    @pytest.mark.asyncio
    async def test_runs_are_serialised(self, sync):
        """Concurrent runs never overlap."""
        active = 0
        peak = 0

        async def fetch():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return []

        await asyncio.gather(sync.run(fetch), sync.run(fetch), sync.run(fetch))

        assert peak == 1

    @pytest.mark.asyncio
    async def test_fetch_error_releases_lock(self, sync):
        """A failed fetch propagates and frees the lock."""
        async def fetch():
            raise ProviderError("Twitter API error", status_code=500)

        with pytest.raises(ProviderError):
            await sync.run(fetch)

        assert not sync.is_running


def _client(handler) -> TwitterClient:
    return TwitterClient("token", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestTwitterClient:
    """Tests for the recent-search client."""

    @pytest.mark.asyncio
    async def test_fetch_recent(self):
        """Tweets are parsed and authors attached from the includes."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                headers={"x-rate-limit-remaining": "3"},
                json={
                    "data": [{
                        "id": "1",
                        "text": LONG_TEXT,
                        "author_id": "42",
                        "created_at": "2025-03-14T15:09:26.000Z",
                        "public_metrics": {"like_count": 4, "retweet_count": 1, "reply_count": 0},
                    }],
                    "includes": {"users": [{"id": "42", "username": "sol_pollinet", "name": "Pollinet"}]},
                    "meta": {"result_count": 1},
                },
            )

        tweets = await _client(handler).fetch_recent("sol_pollinet")

        assert len(tweets) == 1
        assert tweets[0].author.username == "sol_pollinet"
        assert tweets[0].likes == 4
        request = captured["request"]
        assert request.headers["Authorization"] == "Bearer token"
        assert request.url.params["query"] == "from:sol_pollinet"
        assert request.url.params["max_results"] == "12"

    @pytest.mark.asyncio
    async def test_no_data(self):
        """An empty result set is an empty list."""
        client = _client(lambda request: httpx.Response(200, json={"meta": {"result_count": 0}}))

        assert await client.fetch_recent("sol_pollinet") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 500])
    async def test_error_status(self, status):
        """Non-2xx responses raise ProviderError with the status."""
        client = _client(lambda request: httpx.Response(status, text=json.dumps({"title": "nope"})))

        with pytest.raises(ProviderError) as exc_info:
            await client.fetch_recent("sol_pollinet")

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        """429 responses report when the limit resets."""
        reset = int(time.time()) + 600
        client = _client(lambda request: httpx.Response(429, headers={"x-rate-limit-reset": str(reset)}))

        with pytest.raises(ProviderError) as exc_info:
            await client.fetch_recent("sol_pollinet")

        assert exc_info.value.status_code == 429
        assert "Rate limit will reset at" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        """Unparseable bodies are provider errors."""
        client = _client(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(ProviderError):
            await client.fetch_recent("sol_pollinet")
