"""Folds a turn's event stream into the assistant Message."""

from backend.tripply.models.chat import Message
from backend.tripply.models.common import ChatMode
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


class TurnTranscript:
    """Accumulates events, in order, into the assistant's message for the turn.

    The message text grows with every content chunk; a terminal error replaces
    it with the fixed fallback message. Earlier attachments are kept.
    """

    def __init__(self, mode: ChatMode, trip_id: str | None = None) -> None:
        self.mode = mode
        self.trip_id = trip_id
        self.events: list[ChatEvent] = []
        self._chunks: list[str] = []
        self._message = Message(role="assistant", text="", trip_id=trip_id, chat_mode=mode)
        self.error: str | None = None
        self.done = False

    @property
    def text(self) -> str:
        return FALLBACK_MESSAGE if self.error is not None else "".join(self._chunks)

    @property
    def finished(self) -> bool:
        return self.done or self.error is not None

    def add(self, event: ChatEvent) -> None:
        if self.finished:
            raise ValueError(f"event {event.type!r} after terminal event")
        self.events.append(event)

        message = self._message
        if isinstance(event, ToolCallsEvent):
            message.tool_calls = list(event.tool_calls)
        elif isinstance(event, CardsEvent):
            message.cards = list(event.cards)
        elif isinstance(event, VideosEvent):
            message.videos = list(event.videos)
        elif isinstance(event, VideoAnalysisEvent):
            message.video_analysis = event.video_analysis
        elif isinstance(event, SmartVideoResultEvent):
            message.smart_video_result = event.smart_video_result
        elif isinstance(event, ContentEvent):
            self._chunks.append(event.content)
        elif isinstance(event, ItineraryEvent):
            message.itinerary = event.itinerary
        elif isinstance(event, DoneEvent):
            message.citations = list(event.citations)
            self.done = True
        elif isinstance(event, ErrorEvent):
            self.error = event.error

    def message(self) -> Message:
        """Snapshot of the assistant message so far."""
        return self._message.model_copy(update={"text": self.text})
