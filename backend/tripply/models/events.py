"""Turn event models - the ordered, append-only output of one chat turn.

Each event is the atomic unit a transport (e.g. the SSE route) frames and
forwards. Field names serialize as camelCase (`toolCalls`, `chatMode`...).
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.tripply.models.cards import PlaceCard
from backend.tripply.models.chat import ToolCall
from backend.tripply.models.common import ChatMode, Citation
from backend.tripply.models.itinerary import ItineraryResponse
from backend.tripply.models.video import SmartVideoResult, VideoAnalysis, VideoResult

FALLBACK_MESSAGE = "Sorry, I encountered an error while generating a response. Please try again."


class _Event(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_sse(self) -> str:
        """Frame as a Server-Sent Events data line."""
        return f"data: {self.model_dump_json(by_alias=True)}\n\n"


class ToolCallsEvent(_Event):
    """All tool calls of the turn, emitted once every call has settled."""

    type: Literal["toolCalls"] = "toolCalls"
    tool_calls: list[ToolCall]


class CardsEvent(_Event):
    """Place cards extracted from tool results, emitted before any content."""

    type: Literal["cards"] = "cards"
    cards: list[PlaceCard]


class VideosEvent(_Event):
    type: Literal["videos"] = "videos"
    videos: list[VideoResult]


class VideoAnalysisEvent(_Event):
    type: Literal["videoAnalysis"] = "videoAnalysis"
    video_analysis: VideoAnalysis


class SmartVideoResultEvent(_Event):
    type: Literal["smartVideoResult"] = "smartVideoResult"
    smart_video_result: SmartVideoResult


class ContentEvent(_Event):
    """One token-sized chunk of assistant text."""

    type: Literal["content"] = "content"
    content: str


class ItineraryEvent(_Event):
    type: Literal["itinerary"] = "itinerary"
    itinerary: ItineraryResponse


class DoneEvent(_Event):
    """Terminal event of a successful turn."""

    type: Literal["done"] = "done"
    citations: list[Citation] = Field(default_factory=list)
    chat_mode: ChatMode


class ErrorEvent(_Event):
    """Terminal event of a turn that failed after output had started."""

    type: Literal["error"] = "error"
    error: str
    message: str = FALLBACK_MESSAGE


ChatEvent = Annotated[
    ToolCallsEvent
    | CardsEvent
    | VideosEvent
    | VideoAnalysisEvent
    | SmartVideoResultEvent
    | ContentEvent
    | ItineraryEvent
    | DoneEvent
    | ErrorEvent,
    Field(discriminator="type"),
]
