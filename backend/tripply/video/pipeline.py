"""Video enrichment pipeline.

Runs only when a destination is known:
- Query generation (one query, or 1-5 topics for the smart path)
- Provider search, deduplicated by video id across topics
- Destination-name filter, then an AI relevance ranking
- Per-video analysis (featured video) or deep analysis (smart path)
- Natural-language synthesis across analyzed videos (smart path)

Every external call is guarded individually: a failure degrades to a
fallback (generic query, fewer videos, fallback summary, generic answer) and
never propagates to the chat turn.
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Literal, Protocol, get_args

from backend.tripply.adapters.provenance import citation_for_http
from backend.tripply.config import Settings
from backend.tripply.llm.client import ChatModel
from backend.tripply.models.chat import TripContext
from backend.tripply.models.common import ToolResult
from backend.tripply.models.video import (
    SmartVideo,
    SmartVideoResult,
    VideoAnalysis,
    VideoDeepAnalysis,
    VideoPlace,
    VideoPlaceType,
    VideoResult,
)
from backend.tripply.tools.executor import ToolConfigurationError
from backend.tripply.tools.params import SearchVideosParams
from backend.tripply.video import prompts
from backend.tripply.video.filters import (
    apply_ranking,
    dedupe_videos,
    filter_by_city,
    parse_ranked_indices,
)

logger = logging.getLogger(__name__)

_PLACE_TYPES = frozenset(get_args(VideoPlaceType))

# Transcripts shorter than this are treated as missing
MIN_TRANSCRIPT_CHARS = 100


class VideoSearchProvider(Protocol):
    """Video provider search (YouTubeClient in production)."""

    async def search(
        self,
        query: str,
        max_results: int = 10,
        video_duration: Literal["any", "short", "medium", "long"] = "any",
    ) -> list[VideoResult]: ...


class TranscriptSource(Protocol):
    """Transcript lookup (TranscriptFetcher in production)."""

    async def fetch(self, video_id: str) -> str: ...


def fallback_query(destination: str) -> str:
    return f"{destination} travel guide"


def fallback_natural_response(destination: str) -> str:
    return (
        f"Sorry, I couldn't put together a written summary for {destination} right now. "
        "The videos below are a good place to start."
    )


def _load_json_object(content: str) -> dict[str, Any]:
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _strip_fences(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _places(value: Any) -> list[VideoPlace]:
    if not isinstance(value, list):
        return []
    places = []
    for raw in value:
        if not isinstance(raw, dict) or not raw.get("name"):
            continue
        place_type = raw.get("type") if raw.get("type") in _PLACE_TYPES else "other"
        places.append(
            VideoPlace(name=str(raw["name"]), type=place_type, note=str(raw.get("note") or ""))
        )
    return places


def _video_content(video: VideoResult, transcript: str) -> str:
    parts = [f"Video Title: {video.title}", f"Description: {video.description or 'No description'}"]
    if transcript:
        parts.append(f"Transcript:\n{transcript}")
    else:
        parts.append("No transcript available")
    return "\n".join(parts)


def _insights_block(videos: Sequence[SmartVideo]) -> str:
    blocks = []
    for i, item in enumerate(videos, start=1):
        lines = [f"Video {i}: {item.video.title}"]
        analysis = item.analysis
        if analysis is not None:
            lines.append(f"Summary: {analysis.summary}")
            if analysis.things_to_do:
                lines.append("Do: " + "; ".join(analysis.things_to_do))
            if analysis.things_to_avoid:
                lines.append("Avoid: " + "; ".join(analysis.things_to_avoid))
            if analysis.tips:
                lines.append("Tips: " + "; ".join(analysis.tips))
            if analysis.places:
                places = (f"{p.name} ({p.note})" if p.note else p.name for p in analysis.places)
                lines.append("Places: " + "; ".join(places))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


class VideoPipeline:
    """Conditional video enrichment for one chat turn.

    Stateless between turns; every result is built fresh.
    """

    def __init__(
        self,
        model: ChatModel,
        provider: VideoSearchProvider,
        transcripts: TranscriptSource | None,
        settings: Settings,
    ) -> None:
        """Initialize pipeline.

        Args:
            model: Chat model used for the lightweight enrichment calls
            provider: Video search provider
            transcripts: Transcript source (optional; analysis falls back to metadata)
            settings: Limits and the fast model name
        """
        self._model = model
        self._provider = provider
        self._transcripts = transcripts
        self._settings = settings
        self._fast_model = settings.openai_fast_model

    # Query generation

    async def generate_search_query(
        self,
        question: str,
        destination: str,
        country: str | None = None,
        traveler_type: str | None = None,
    ) -> str:
        """One short provider-friendly query; "<destination> travel guide" on failure."""
        location = f"{destination}, {country}" if country else destination
        user = f'User question: "{question}"\nLocation: {location}'
        if traveler_type:
            user += f"\nTraveler type: {traveler_type}"
        user += "\nGenerate YouTube search query:"

        try:
            reply = await self._model.complete(
                [
                    {"role": "system", "content": prompts.SEARCH_QUERY_SYSTEM},
                    {"role": "user", "content": user},
                ],
                model=self._fast_model,
                temperature=0.3,
                max_tokens=50,
            )
        except Exception as e:
            logger.warning("Video query generation failed: %s", e)
            return fallback_query(destination)

        query = reply.content.strip().strip('"').strip()
        return query or fallback_query(destination)

    async def extract_search_titles(self, question: str, destination: str) -> list[str]:
        """1-5 distinct topic queries for the smart path; the generic query on failure."""
        try:
            reply = await self._model.complete(
                [
                    {"role": "system", "content": prompts.SEARCH_TITLES_SYSTEM},
                    {
                        "role": "user",
                        "content": (
                            f'User question: "{question}"\nLocation: {destination}\n'
                            "Extract search titles:"
                        ),
                    },
                ],
                model=self._fast_model,
                temperature=0.3,
                max_tokens=200,
            )
            titles = _string_list(json.loads(_strip_fences(reply.content)))
        except Exception as e:
            logger.warning("Search title extraction failed: %s", e)
            return [fallback_query(destination)]

        unique = list(dict.fromkeys(titles))[: self._settings.smart_video_max_topics]
        logger.info("Extracted %d video topics for %s", len(unique), destination)
        return unique or [fallback_query(destination)]

    # Search and filtering

    async def _search_provider(
        self,
        query: str,
        video_duration: Literal["any", "short", "medium", "long"] = "any",
    ) -> list[VideoResult]:
        try:
            return await self._provider.search(
                query,
                max_results=self._settings.video_candidates_per_query,
                video_duration=video_duration,
            )
        except Exception as e:
            logger.warning("Video search failed for %r: %s", query, e)
            return []

    async def filter_by_ai_relevance(
        self,
        videos: Sequence[VideoResult],
        question: str,
        destination: str,
        limit: int | None = None,
    ) -> list[VideoResult]:
        """Rank candidates against the question; first `limit` in provider order on failure."""
        limit = limit or self._settings.video_result_limit
        if len(videos) <= limit:
            return list(videos)

        video_list = "\n".join(f"{i}. {v.title}" for i, v in enumerate(videos))
        try:
            reply = await self._model.complete(
                [
                    {"role": "system", "content": prompts.RELEVANCE_SYSTEM.format(limit=limit)},
                    {
                        "role": "user",
                        "content": (
                            f'User question: "{question}"\nLocation: {destination}\n\n'
                            f"Videos:\n{video_list}\n\n"
                            f"Return the {limit} most relevant video indices:"
                        ),
                    },
                ],
                model=self._fast_model,
                temperature=0.1,
                max_tokens=100,
            )
        except Exception as e:
            logger.warning("AI relevance filter failed: %s", e)
            return list(videos[:limit])

        indices = parse_ranked_indices(reply.content, len(videos))
        return apply_ranking(videos, indices, limit)

    # Analysis

    async def _transcript(self, video_id: str) -> str:
        if self._transcripts is None:
            return ""
        try:
            text = await self._transcripts.fetch(video_id)
        except Exception as e:
            logger.info("Transcript unavailable for %s: %s", video_id, e)
            return ""
        return text if len(text) >= MIN_TRANSCRIPT_CHARS else ""

    async def analyze_video(self, video: VideoResult, destination: str) -> VideoAnalysis:
        """Summary, highlights and place mentions for the featured video.

        Falls back to a generic summary built from the title on any failure.
        """
        transcript = await self._transcript(video.video_id)
        source_note = prompts.TRANSCRIPT_NOTE if transcript else prompts.NO_TRANSCRIPT_NOTE
        try:
            reply = await self._model.complete(
                [
                    {
                        "role": "system",
                        "content": prompts.ANALYSIS_SYSTEM.format(
                            destination=destination, source_note=source_note
                        ),
                    },
                    {"role": "user", "content": _video_content(video, transcript)},
                ],
                model=self._fast_model,
                temperature=0.4,
                max_tokens=600,
                json_mode=True,
            )
            result = _load_json_object(reply.content)
        except Exception as e:
            logger.warning("Video analysis failed for %s: %s", video.video_id, e)
            result = {}

        return VideoAnalysis(
            video_id=video.video_id,
            summary=str(result.get("summary") or f"Travel insights about {destination}: {video.title}"),
            highlights=_string_list(result.get("highlights")),
            places=_places(result.get("places")),
            analyzed_at=datetime.now(UTC),
        )

    async def deep_analyze_video(
        self, video: VideoResult, destination: str, question: str
    ) -> VideoDeepAnalysis:
        """Actionable advice extracted from a video, transcript-grounded when possible."""
        transcript = await self._transcript(video.video_id)
        source_note = prompts.TRANSCRIPT_NOTE if transcript else prompts.NO_TRANSCRIPT_NOTE
        try:
            reply = await self._model.complete(
                [
                    {
                        "role": "system",
                        "content": prompts.DEEP_ANALYSIS_SYSTEM.format(
                            destination=destination, question=question, source_note=source_note
                        ),
                    },
                    {"role": "user", "content": _video_content(video, transcript)},
                ],
                model=self._fast_model,
                temperature=0.4,
                max_tokens=1000,
                json_mode=True,
            )
            result = _load_json_object(reply.content)
        except Exception as e:
            logger.warning("Deep analysis failed for %s: %s", video.video_id, e)
            result = {}

        return VideoDeepAnalysis(
            video_id=video.video_id,
            summary=str(result.get("summary") or f"Travel insights about {destination}: {video.title}"),
            things_to_do=_string_list(result.get("thingsToDo")),
            things_to_avoid=_string_list(result.get("thingsToAvoid")),
            tips=_string_list(result.get("tips")),
            places=_places(result.get("places")),
            has_transcript=bool(transcript),
            analyzed_at=datetime.now(UTC),
        )

    async def synthesize_natural_response(
        self, question: str, destination: str, videos: Sequence[SmartVideo]
    ) -> str:
        """Bounded answer with a fixed section layout; a generic apology on failure."""
        word_budget = self._settings.natural_response_word_budget
        try:
            reply = await self._model.complete(
                [
                    {
                        "role": "system",
                        "content": prompts.NATURAL_RESPONSE_SYSTEM.format(
                            destination=destination, word_budget=word_budget
                        ),
                    },
                    {
                        "role": "user",
                        "content": (
                            f'Question: "{question}"\n\nVideo insights:\n{_insights_block(videos)}'
                        ),
                    },
                ],
                model=self._fast_model,
                temperature=0.6,
                # ~1.4 tokens per word plus markdown
                max_tokens=int(word_budget * 1.6) + 50,
            )
        except Exception as e:
            logger.warning("Natural response synthesis failed: %s", e)
            return fallback_natural_response(destination)

        return reply.content.strip() or fallback_natural_response(destination)

    # Entry points

    async def search(self, question: str, trip_context: TripContext) -> list[VideoResult]:
        """Single-query path: generated query, search, city filter, AI ranking."""
        destination = (trip_context.destination or "").strip()
        if not destination:
            return []

        query = await self.generate_search_query(
            question, destination, trip_context.country, trip_context.traveler_type
        )
        candidates = await self._search_provider(query)
        in_city = filter_by_city(candidates, destination)
        videos = await self.filter_by_ai_relevance(in_city, question, destination)
        logger.info(
            "Video search %r: %d found, %d in city, %d returned",
            query,
            len(candidates),
            len(in_city),
            len(videos),
        )
        return videos

    async def smart_search(self, question: str, trip_context: TripContext) -> SmartVideoResult | None:
        """Multi-topic path: several videos deep-analyzed and merged into one answer.

        Returns None when no video survives filtering.
        """
        destination = (trip_context.destination or "").strip()
        if not destination:
            return None

        titles = await self.extract_search_titles(question, destination)
        batches = await asyncio.gather(
            *(self._search_provider(title, video_duration="medium") for title in titles)
        )
        candidates = dedupe_videos(batches)
        in_city = filter_by_city(candidates, destination)
        videos = await self.filter_by_ai_relevance(in_city, question, destination)
        logger.info(
            "Smart video search for %s: %d topics, %d candidates, %d in city, %d selected",
            destination,
            len(titles),
            len(candidates),
            len(in_city),
            len(videos),
        )
        if not videos:
            return None

        analyses = await asyncio.gather(
            *(self.deep_analyze_video(video, destination, question) for video in videos)
        )
        smart_videos = [
            SmartVideo(video=video, analysis=analysis) for video, analysis in zip(videos, analyses)
        ]
        ai_response = await self.synthesize_natural_response(question, destination, smart_videos)
        return SmartVideoResult(ai_response=ai_response, videos=smart_videos, search_titles=titles)

    async def search_videos_tool(self, params: SearchVideosParams) -> ToolResult[list[VideoResult]]:
        """Implementation behind the `search_videos` tool."""
        query = await self.generate_search_query(
            params.query, params.location, params.country, params.traveler_type
        )
        try:
            candidates = await self._provider.search(
                query, max_results=self._settings.video_candidates_per_query
            )
        except ToolConfigurationError as e:
            return ToolResult.failure(str(e))

        in_city = filter_by_city(candidates, params.location)
        videos = await self.filter_by_ai_relevance(in_city, params.query, params.location)
        sources = [
            citation_for_http(
                v.title,
                f"https://www.youtube.com/watch?v={v.video_id}",
                snippet=v.channel_title,
                confidence=0.8,
            )
            for v in videos
        ]
        return ToolResult.ok(videos, sources=sources)
