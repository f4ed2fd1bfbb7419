"""
Client for the X (Twitter) API v2 recent-search endpoint.
"""

from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from pollinet_kb.exceptions import ProviderError
from pollinet_kb.sync.tweets import Tweet, TweetAuthor
from pollinet_kb.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
LOW_RATE_LIMIT = 5


def _rate_limit_error(reset: int | None) -> ProviderError:
    if reset is not None:
        reset_time = datetime.fromtimestamp(reset, tz=timezone.utc)
        wait_seconds = max(reset - int(datetime.now(timezone.utc).timestamp()), 0)
        reset_info = (
            f"Rate limit will reset at: {reset_time.strftime('%Y-%m-%d %H:%M:%S UTC')} "
            f"(in approximately {wait_seconds} seconds / {wait_seconds // 60} minutes). "
            "Please wait before retrying the sync."
        )
    else:
        reset_info = "Please wait 15 minutes before retrying."
    return ProviderError(f"Rate limited by the Twitter API. {reset_info}", status_code=429)


def _header_int(response: httpx.Response, name: str) -> int | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class TwitterClient:
    """
    Fetches recent tweets of one account with app-only bearer authentication.
    """

    def __init__(
        self,
        bearer_token: str,
        base_url: str = RECENT_SEARCH_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None
    ):
        self.bearer_token = bearer_token.strip()
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_recent(self, username: str, max_results: int = 12) -> list[Tweet]:
        """
        Fetch the latest tweets posted by ``username``.

        Raises:
            ProviderError: On transport failure, a non-2xx status or an unparseable body
        """
        params = {
            "query": f"from:{username}",
            "max_results": str(max_results),
            "tweet.fields": "created_at,author_id,public_metrics",
            "expansions": "author_id",
            "user.fields": "username,name",
        }
        headers = {"Authorization": f"Bearer {self.bearer_token}"}

        logger.debug(f"Fetching tweets with query: {params['query']} (max: {max_results})")

        try:
            response = await self._get_client().get(self.base_url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to fetch tweets from Twitter API: {e}") from e

        if response.status_code == 401:
            raise ProviderError(
                "Unauthorized: invalid or missing bearer token",
                status_code=401,
                body=response.text
            )
        if response.status_code == 403:
            raise ProviderError(
                "Forbidden: the bearer token has no access to the recent-search endpoint",
                status_code=403,
                body=response.text
            )
        if response.status_code == 429:
            raise _rate_limit_error(_header_int(response, "x-rate-limit-reset"))
        if not response.is_success:
            raise ProviderError("Twitter API error", status_code=response.status_code, body=response.text)

        remaining = _header_int(response, "x-rate-limit-remaining")
        if remaining is not None:
            logger.info(f"Twitter API rate limit: {remaining} requests remaining")
            if remaining < LOW_RATE_LIMIT:
                logger.warning("Low Twitter API rate limit remaining")

        try:
            return self._parse(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderError(f"Failed to parse Twitter API response: {e}") from e

    @staticmethod
    def _parse(payload: dict[str, Any]) -> list[Tweet]:
        """Build tweets from a response body, attaching expanded authors."""
        users = {
            user["id"]: TweetAuthor(**user)
            for user in payload.get("includes", {}).get("users", [])
            if "id" in user and "username" in user
        }
        tweets = []
        for item in payload.get("data") or []:
            tweet = Tweet(**item)
            if tweet.author is None and tweet.author_id in users:
                tweet = tweet.model_copy(update={"author": users[tweet.author_id]})
            tweets.append(tweet)
        return tweets
