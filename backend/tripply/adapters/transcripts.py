"""Video transcript fetcher backed by youtube-transcript-api."""

import asyncio
import logging
import re

from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

logger = logging.getLogger(__name__)

# Caption cues such as [Music] or [Applause]
_CUE = re.compile(r"^\[.*\]$")


class TranscriptFetcher:
    """Fetches English captions as one plain-text block."""

    def __init__(self, char_limit: int = 8000, api: YouTubeTranscriptApi | None = None) -> None:
        self._char_limit = char_limit
        self._api = api or YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str) -> str:
        transcript = self._api.fetch(video_id, languages=["en"])
        lines = (snippet.text.strip() for snippet in transcript)
        return " ".join(line for line in lines if line and not _CUE.match(line))

    async def fetch(self, video_id: str) -> str:
        """Transcript text truncated to the char limit, or "" if the video has none."""
        try:
            text = await asyncio.to_thread(self._fetch_sync, video_id)
        except CouldNotRetrieveTranscript as e:
            logger.info("No transcript for %s: %s", video_id, type(e).__name__)
            return ""
        return text[: self._char_limit]
