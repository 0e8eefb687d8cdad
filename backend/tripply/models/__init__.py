"""Models package - re-exports for convenience."""

from backend.tripply.models.cards import CardType, PlaceCard
from backend.tripply.models.chat import Message, ToolCall, ToolCallRequest, TripContext, TurnRequest
from backend.tripply.models.common import ChatMode, Citation, Coordinates, ToolResult
from backend.tripply.models.events import (
    FALLBACK_MESSAGE,
    CardsEvent,
    ChatEvent,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    ItineraryEvent,
    SmartVideoResultEvent,
    ToolCallsEvent,
    VideoAnalysisEvent,
    VideosEvent,
)
from backend.tripply.models.itinerary import (
    ItineraryDay,
    ItineraryItem,
    ItineraryResponse,
    TripSummary,
)
from backend.tripply.models.tool_results import (
    EventResult,
    HotelOffer,
    PlaceResult,
    RedditPost,
    TravelTimeResult,
    WeatherDay,
    WeatherReport,
    WebResult,
)
from backend.tripply.models.video import (
    SmartVideo,
    SmartVideoResult,
    VideoAnalysis,
    VideoDeepAnalysis,
    VideoPlace,
    VideoResult,
)

__all__ = [
    # Common
    "ChatMode",
    "Citation",
    "Coordinates",
    "ToolResult",
    # Chat
    "Message",
    "ToolCall",
    "ToolCallRequest",
    "TripContext",
    "TurnRequest",
    # Cards
    "CardType",
    "PlaceCard",
    # Tool results
    "EventResult",
    "HotelOffer",
    "PlaceResult",
    "RedditPost",
    "TravelTimeResult",
    "WeatherDay",
    "WeatherReport",
    "WebResult",
    # Itinerary
    "ItineraryResponse",
    "ItineraryDay",
    "ItineraryItem",
    "TripSummary",
    # Video
    "SmartVideo",
    "SmartVideoResult",
    "VideoAnalysis",
    "VideoDeepAnalysis",
    "VideoPlace",
    "VideoResult",
    # Events
    "FALLBACK_MESSAGE",
    "ChatEvent",
    "CardsEvent",
    "ContentEvent",
    "DoneEvent",
    "ErrorEvent",
    "ItineraryEvent",
    "SmartVideoResultEvent",
    "ToolCallsEvent",
    "VideoAnalysisEvent",
    "VideosEvent",
]
