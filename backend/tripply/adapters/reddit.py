"""Reddit adapter - r/travel search over OAuth2 client credentials."""

import logging
import time
from datetime import UTC, datetime

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import ToolResult
from backend.tripply.models.tool_results import RedditPost
from backend.tripply.tools.params import SearchRedditParams

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
SEARCH_URL = "https://oauth.reddit.com/r/travel/search"

MAX_SELFTEXT_CHARS = 1500
MAX_CITATIONS = 5


class RedditAuthError(Exception):
    """Reddit rejected the client credentials."""

    pass


class RedditClient:
    """Searches r/travel, caching the app-only access token until it expires."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._user_agent = user_agent
        self._client = client
        self._token: str | None = None
        self._token_expiry = 0.0

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def _access_token(self, http: httpx.AsyncClient) -> str:
        if self._token and time.monotonic() < self._token_expiry:
            return self._token

        response = await http.post(
            TOKEN_URL,
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
            headers={"User-Agent": self._user_agent},
        )
        if response.status_code != 200:
            raise RedditAuthError(f"Reddit auth failed: {response.status_code}")
        payload = response.json()
        if not payload.get("access_token"):
            raise RedditAuthError("No access token in response")

        self._token = payload["access_token"]
        # Refresh a minute early
        self._token_expiry = time.monotonic() + float(payload.get("expires_in", 3600)) - 60
        logger.info("Obtained Reddit access token, expires in %ss", payload.get("expires_in"))
        return self._token

    async def search(self, params: SearchRedditParams) -> ToolResult[list[RedditPost]]:
        """Search r/travel for tips about a destination.

        Raises:
            httpx.HTTPError: On network or HTTP errors
            RedditAuthError: If the token request is rejected
        """
        if not self.configured:
            return ToolResult.failure("Reddit API credentials not configured")

        async with http_client(self._client) as http:
            token = await self._access_token(http)
            response = await http.get(
                SEARCH_URL,
                params={
                    "q": f"{params.destination} travel tips",
                    "restrict_sr": "on",
                    "sort": params.sort,
                    "t": params.time,
                    "limit": params.limit,
                },
                headers={"Authorization": f"Bearer {token}", "User-Agent": self._user_agent},
            )
            response.raise_for_status()
            children = (response.json().get("data") or {}).get("children") or []

        posts = [
            RedditPost(
                id=child["data"]["id"],
                title=child["data"]["title"],
                selftext=(child["data"].get("selftext") or "")[:MAX_SELFTEXT_CHARS],
                score=child["data"].get("score", 0),
                num_comments=child["data"].get("num_comments", 0),
                url=child["data"].get("url"),
                permalink=f"https://reddit.com{child['data']['permalink']}",
                created_at=datetime.fromtimestamp(child["data"].get("created_utc", 0), tz=UTC),
                author=child["data"].get("author"),
            )
            for child in children
            if child.get("kind") == "t3"
        ]
        logger.info("Found %d Reddit posts for %s", len(posts), params.destination)

        sources = [
            citation_for_http(
                post.title,
                post.permalink,
                snippet=(
                    post.selftext[:200] + ("..." if len(post.selftext) > 200 else "")
                    if post.selftext
                    else f"{post.score} upvotes, {post.num_comments} comments"
                ),
                confidence=0.7,
                timestamp=post.created_at,
            )
            for post in posts[:MAX_CITATIONS]
        ]
        return ToolResult.ok(posts, sources=sources)
