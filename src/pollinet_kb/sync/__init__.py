"""
Synchronisation of external sources (X/Twitter) into the knowledge base.
"""

from pollinet_kb.sync.models import SyncOutcome, SyncResult
from pollinet_kb.sync.service import KnowledgeSync
from pollinet_kb.sync.tweets import (
    Tweet,
    TweetAuthor,
    TweetMetrics,
    categorize_tweet,
    filter_tweets,
    format_tweet_content,
    tweet_metadata,
)
from pollinet_kb.sync.twitter import TwitterClient

__all__ = [
    "KnowledgeSync",
    "SyncOutcome",
    "SyncResult",
    "Tweet",
    "TweetAuthor",
    "TweetMetrics",
    "TwitterClient",
    "categorize_tweet",
    "filter_tweets",
    "format_tweet_content",
    "tweet_metadata",
]
