"""Video models - provider results and AI-derived analysis."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

VideoPlaceType = Literal["restaurant", "attraction", "hotel", "landmark", "other"]


class VideoResult(BaseModel):
    """Video metadata from the provider."""

    video_id: str
    title: str
    description: str = ""
    thumbnail_url: str | None = None
    channel_title: str | None = None
    published_at: datetime | None = None
    view_count: int | None = None
    duration: str | None = None


class VideoPlace(BaseModel):
    """Place mentioned in a video, with the reason it came up."""

    name: str
    type: VideoPlaceType = "other"
    note: str = ""


class VideoAnalysis(BaseModel):
    """Per-video summary for the featured video."""

    video_id: str
    summary: str
    highlights: list[str] = Field(default_factory=list)
    places: list[VideoPlace] = Field(default_factory=list)
    analyzed_at: datetime


class VideoDeepAnalysis(BaseModel):
    """Transcript-grounded analysis used by the smart video path."""

    video_id: str
    summary: str
    things_to_do: list[str] = Field(default_factory=list)
    things_to_avoid: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    places: list[VideoPlace] = Field(default_factory=list)
    has_transcript: bool = False
    analyzed_at: datetime


class SmartVideo(BaseModel):
    """Source video with its deep analysis (absent if analysis failed outright)."""

    video: VideoResult
    analysis: VideoDeepAnalysis | None = None


class SmartVideoResult(BaseModel):
    """Natural-language answer built from several video transcripts."""

    ai_response: str
    videos: list[SmartVideo]
    search_titles: list[str] = Field(default_factory=list)
