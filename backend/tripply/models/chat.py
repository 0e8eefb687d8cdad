"""Conversation models - messages, tool calls and trip context."""

from datetime import UTC, date, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from backend.tripply.models.cards import PlaceCard
from backend.tripply.models.common import ChatMode, Citation, Role, ToolResult
from backend.tripply.models.itinerary import ItineraryResponse
from backend.tripply.models.video import SmartVideoResult, VideoAnalysis, VideoResult


class TripContext(BaseModel):
    """Advisory trip details supplied by the hosting application.

    Every field is optional; richer context only improves prompt quality.
    """

    destination: str | None = None
    country: str | None = None
    title: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    days: int | None = Field(None, ge=1)
    traveler_type: str | None = None
    adults: int | None = Field(None, ge=0)
    children: int | None = Field(None, ge=0)
    budget_range: tuple[float, float] | None = None
    budget_tier: str | None = None
    interests: list[str] = Field(default_factory=list)
    pace: str | None = None
    saved_places_count: int | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "TripContext":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self

    @property
    def day_count(self) -> int | None:
        """Trip length in days, from `days` or the inclusive date range."""
        if self.days:
            return self.days
        if self.start_date and self.end_date:
            return (self.end_date - self.start_date).days + 1
        return None

    @property
    def party(self) -> str | None:
        """Human-readable party composition."""
        parts = []
        if self.adults:
            parts.append(f"{self.adults} adult{'s' if self.adults != 1 else ''}")
        if self.children:
            parts.append(f"{self.children} child{'ren' if self.children != 1 else ''}")
        return ", ".join(parts) or None


class ToolCallRequest(BaseModel):
    """Tool invocation as requested by the model, before execution."""

    id: str
    name: str
    arguments: str = "{}"


class ToolCall(BaseModel):
    """Completed tool invocation: request parameters plus settled result."""

    id: str
    tool: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    result: ToolResult


class Message(BaseModel):
    """One turn of conversation."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    trip_id: str | None = None
    role: Role
    text: str
    chat_mode: ChatMode | None = None
    tool_calls: list[ToolCall] | None = None
    cards: list[PlaceCard] | None = None
    citations: list[Citation] | None = None
    videos: list[VideoResult] | None = None
    video_analysis: VideoAnalysis | None = None
    smart_video_result: SmartVideoResult | None = None
    itinerary: ItineraryResponse | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TurnRequest(BaseModel):
    """Inputs for one conversation turn."""

    prior_messages: list[Message] = Field(default_factory=list)
    user_message: str = Field(..., min_length=1)
    mode: ChatMode = "ask"
    trip_context: TripContext | None = None

    @property
    def destination(self) -> str | None:
        """Known destination, if any (gates video enrichment)."""
        if self.trip_context and self.trip_context.destination:
            return self.trip_context.destination.strip() or None
        return None
