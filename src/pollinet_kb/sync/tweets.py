"""
Tweet models and the helpers that turn tweets into knowledge-base documents.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from pollinet_kb.utils.logging import get_logger

logger = get_logger(__name__)

OFFICIAL_USERNAME = "sol_pollinet"
MIN_TWEET_LENGTH = 50
MIN_LIKES = 10

# Checked in order; the first matching row wins.
CATEGORY_KEYWORDS: list[tuple[str, str, tuple[str, ...]]] = [
    ("pollinet_announcement", "Announcement",
     ("announcement", "announcing", "we're excited", "introducing")),
    ("pollinet_updates", "Update",
     ("update", "updated", "updates", "changelog", "version")),
    ("pollinet_news", "News",
     ("news", "headline", "breaking", "report")),
    ("pollinet_talks", "Talk/Event",
     ("talk", "speaking", "presentation", "conference", "event", "webinar")),
    ("pollinet_partnerships", "Partnership",
     ("partnership", "collaboration", "integrated", "working with")),
    ("pollinet_information", "Information/Guide",
     ("tutorial", "guide", "how to", "documentation", "docs")),
]
DEFAULT_CATEGORY = ("pollinet_information", "Information")


class TweetMetrics(BaseModel):
    """Public engagement counters."""
    like_count: Optional[int] = None
    retweet_count: Optional[int] = None
    reply_count: Optional[int] = None


class TweetAuthor(BaseModel):
    """Tweet author as expanded by the API."""
    id: Optional[str] = None
    username: str
    name: str = ""


class Tweet(BaseModel):
    """A tweet from the recent-search endpoint."""
    id: str
    text: str
    author_id: Optional[str] = None
    created_at: Optional[str] = None
    public_metrics: Optional[TweetMetrics] = None
    author: Optional[TweetAuthor] = None

    @property
    def likes(self) -> int:
        if self.public_metrics is None or self.public_metrics.like_count is None:
            return 0
        return self.public_metrics.like_count

    @property
    def retweets(self) -> int:
        if self.public_metrics is None or self.public_metrics.retweet_count is None:
            return 0
        return self.public_metrics.retweet_count

    def created_datetime(self) -> Optional[datetime]:
        """Parse ``created_at`` (RFC 3339), or None when absent or malformed."""
        if not self.created_at:
            return None
        try:
            return datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable created_at on tweet {self.id}: {self.created_at}")
            return None


def is_official(tweet: Tweet, official_username: str = OFFICIAL_USERNAME) -> bool:
    return tweet.author is not None and tweet.author.username == official_username


def filter_tweets(tweets: list[Tweet], official_username: str = OFFICIAL_USERNAME) -> list[Tweet]:
    """Keep tweets worth indexing.

    Retweets and texts shorter than 50 characters are dropped. The official
    account's tweets are kept regardless of engagement; anyone else's need
    at least 10 likes.
    """
    kept = []
    for tweet in tweets:
        if tweet.text.startswith("RT @"):
            continue
        if len(tweet.text) < MIN_TWEET_LENGTH:
            continue
        if is_official(tweet, official_username) or tweet.likes >= MIN_LIKES:
            kept.append(tweet)
    return kept


def categorize_tweet(tweet: Tweet) -> tuple[str, str]:
    """Return the ``(category, label)`` pair for a tweet."""
    text = tweet.text.lower()
    for category, label, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category, label
    return DEFAULT_CATEGORY


def format_tweet_content(
    tweet: Tweet,
    category_label: str,
    domain_name: str = "Pollinet",
    official_username: str = OFFICIAL_USERNAME,
) -> str:
    """Render a tweet as a readable knowledge-base document."""
    lines = [f"📢 {domain_name} {category_label}: ", "", tweet.text, "", "---"]
    lines.append(f"Source: @{official_username} (Official {domain_name} Account)")
    username = tweet.author.username if tweet.author else official_username
    lines.append(f"Link: https://x.com/{username}/status/{tweet.id}")

    created = tweet.created_datetime()
    if created is not None:
        lines.append(f"Date: {created.strftime('%B %d, %Y at %I:%M %p UTC')}")

    engagement = []
    if tweet.likes > 0:
        engagement.append(f"{tweet.likes} likes")
    if tweet.retweets > 0:
        engagement.append(f"{tweet.retweets} retweets")
    if engagement:
        lines.append(f"Engagement: {', '.join(engagement)}")

    lines.append("---")
    return "\n".join(lines) + "\n"


def tweet_metadata(
    tweet: Tweet,
    category: str,
    category_label: str,
    official_username: str = OFFICIAL_USERNAME,
) -> dict[str, str]:
    """Build the string metadata stored with a tweet's chunks."""
    metadata = {
        "source": "twitter",
        "category": category,
        "category_label": category_label,
        "tweet_id": tweet.id,
        "author": tweet.author.username if tweet.author else official_username,
    }
    if tweet.created_at:
        metadata["created_at"] = tweet.created_at
        created = tweet.created_datetime()
        if created is not None:
            metadata["date_formatted"] = created.strftime("%B %d, %Y")
    if tweet.public_metrics is not None:
        if tweet.public_metrics.like_count is not None:
            metadata["likes"] = str(tweet.public_metrics.like_count)
        if tweet.public_metrics.retweet_count is not None:
            metadata["retweets"] = str(tweet.public_metrics.retweet_count)
    return metadata
