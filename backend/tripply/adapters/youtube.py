"""YouTube Data API adapter - video search plus duration and view counts."""

import logging
import re
from datetime import datetime
from typing import Any, Literal

import httpx

from backend.tripply.adapters.provenance import http_client
from backend.tripply.models.video import VideoResult
from backend.tripply.tools.executor import ToolConfigurationError

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"

VideoDuration = Literal["any", "short", "medium", "long"]

_ISO_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(iso_duration: str | None) -> int:
    """Parse an ISO 8601 duration to seconds ("PT4M13S" -> 253)."""
    match = _ISO_DURATION.fullmatch(iso_duration or "")
    if not match:
        return 0
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_duration(seconds: int) -> str:
    """Format seconds as "5:30" or "1:05:30"."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _thumbnail(snippet: dict[str, Any]) -> str | None:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("high", "medium", "default"):
        if thumbnails.get(size, {}).get("url"):
            return thumbnails[size]["url"]
    return None


class YouTubeClient:
    """Thin async client over the YouTube Data API v3."""

    def __init__(self, api_key: str, client: httpx.AsyncClient | None = None) -> None:
        self._api_key = api_key
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def search(
        self,
        query: str,
        max_results: int = 10,
        video_duration: VideoDuration = "any",
    ) -> list[VideoResult]:
        """Search embeddable videos, in provider relevance order.

        Raises:
            ToolConfigurationError: If no API key is configured
            httpx.HTTPError: On network or HTTP errors
        """
        if not self._api_key:
            raise ToolConfigurationError("YouTube API key not configured")

        params: dict[str, str | int] = {
            "part": "snippet",
            "type": "video",
            "videoEmbeddable": "true",
            "safeSearch": "strict",
            "order": "relevance",
            "maxResults": max_results,
            "q": query,
            "key": self._api_key,
        }
        if video_duration != "any":
            params["videoDuration"] = video_duration

        async with http_client(self._client) as http:
            response = await http.get(SEARCH_URL, params=params)
            response.raise_for_status()
            items = response.json().get("items") or []

            videos = [
                VideoResult(
                    video_id=item["id"]["videoId"],
                    title=item["snippet"].get("title", ""),
                    description=item["snippet"].get("description", ""),
                    thumbnail_url=_thumbnail(item["snippet"]),
                    channel_title=item["snippet"].get("channelTitle"),
                    published_at=(
                        datetime.fromisoformat(item["snippet"]["publishedAt"].replace("Z", "+00:00"))
                        if item["snippet"].get("publishedAt")
                        else None
                    ),
                )
                for item in items
                if (item.get("id") or {}).get("videoId")
            ]
            if not videos:
                return []

            details = await http.get(
                VIDEOS_URL,
                params={
                    "part": "contentDetails,statistics",
                    "id": ",".join(v.video_id for v in videos),
                    "key": self._api_key,
                },
            )
            details.raise_for_status()
            by_id = {item["id"]: item for item in details.json().get("items") or []}

        for video in videos:
            detail = by_id.get(video.video_id)
            if detail is None:
                continue
            seconds = parse_duration((detail.get("contentDetails") or {}).get("duration"))
            video.duration = format_duration(seconds) if seconds else None
            views = (detail.get("statistics") or {}).get("viewCount")
            video.view_count = int(views) if views is not None else None

        logger.debug("YouTube search %r returned %d videos", query, len(videos))
        return videos
