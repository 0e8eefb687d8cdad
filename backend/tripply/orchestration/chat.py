"""Chat turn orchestration.

One turn runs as:
    building-context -> decision call -> (tools?) -> enrichment
    -> streamed answer -> (itinerary?) -> done

Events are emitted append-only. Only the decision call is fatal
(TurnFailedError, raised before any event); later failures end the stream
with an ErrorEvent and never retract what was already emitted.
"""

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeVar

from backend.tripply.cards.extract import extract_cards
from backend.tripply.citations.extract import extract_citations
from backend.tripply.config import Settings
from backend.tripply.itinerary.parser import parse_itinerary
from backend.tripply.llm.client import (
    AssistantReply,
    ChatMessage,
    ChatModel,
    assistant_tool_call_message,
    tool_result_message,
)
from backend.tripply.llm.prompts import build_system_prompt
from backend.tripply.models.chat import Message, ToolCall, TripContext, TurnRequest
from backend.tripply.models.events import (
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
from backend.tripply.models.tool_results import parse_payload
from backend.tripply.models.video import SmartVideoResult, VideoResult
from backend.tripply.orchestration.deadline import TurnDeadline, TurnDeadlineExceeded
from backend.tripply.tools.executor import CancelToken, ToolCancelledError, ToolExecutor
from backend.tripply.utils.metrics import record_enrichment, record_turn
from backend.tripply.video.pipeline import VideoPipeline

logger = logging.getLogger(__name__)

T = TypeVar("T")

VIDEO_TOOL = "search_videos"

# Word-sized pieces, each carrying its leading whitespace
_WORD_CHUNK = re.compile(r"\s*\S+")


class TurnFailedError(Exception):
    """The decision call failed; the turn produced no output."""

    pass


@dataclass
class _TurnState:
    """Mutable per-turn scratch space; never shared across turns."""

    messages: list[ChatMessage]
    tool_calls: list[ToolCall] = field(default_factory=list)
    chunks: list[str] = field(default_factory=list)
    smart_result: SmartVideoResult | None = None


def word_chunks(text: str) -> list[str]:
    """Split text into token-sized chunks that join back losslessly, minus trailing space."""
    return _WORD_CHUNK.findall(text)


def history_messages(prior_messages: Sequence[Message], window: int) -> list[ChatMessage]:
    """Last `window` prior turns as provider messages (empty texts dropped)."""
    recent = [m for m in prior_messages if m.text.strip()][-window:] if window > 0 else []
    return [{"role": m.role, "content": m.text} for m in recent]


def videos_from_tool_calls(tool_calls: Sequence[ToolCall]) -> list[VideoResult]:
    """Videos returned by successful search_videos calls, in call order."""
    videos: list[VideoResult] = []
    for call in tool_calls:
        if call.tool == VIDEO_TOOL and call.result.success:
            videos.extend(parse_payload(VIDEO_TOOL, call.result.data))
    return videos


class ChatOrchestrator:
    """Drives one conversation turn at a time. Holds no cross-turn state."""

    def __init__(
        self,
        model: ChatModel,
        executor: ToolExecutor,
        settings: Settings,
        video_pipeline: VideoPipeline | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            model: Chat model for the decision and answer calls
            executor: Tool executor over the declared registry
            settings: History window and turn timeout
            video_pipeline: Video enrichment (optional; skipped when absent)
        """
        self._model = model
        self._executor = executor
        self._settings = settings
        self._videos = video_pipeline

    def build_messages(
        self, request: TurnRequest, now: datetime | None = None
    ) -> list[ChatMessage]:
        """System prompt, bounded history and the new user message."""
        system_prompt = build_system_prompt(request.mode, request.trip_context, now=now)
        return [
            {"role": "system", "content": system_prompt},
            *history_messages(request.prior_messages, self._settings.history_window),
            {"role": "user", "content": request.user_message},
        ]

    async def start_turn(
        self,
        request: TurnRequest,
        cancel_token: CancelToken | None = None,
    ) -> AsyncIterator[ChatEvent]:
        """Run one turn and yield its ordered events.

        Args:
            request: Prior messages, the user message, the mode and trip context
            cancel_token: Cooperative cancellation (optional)

        Yields:
            toolCalls?, cards?, videos?, videoAnalysis? | smartVideoResult?,
            content*, itinerary?, then done (or a terminal error)

        Raises:
            TurnFailedError: If the decision call fails (before any event)
        """
        token = cancel_token or CancelToken()
        deadline = TurnDeadline(self._settings.turn_timeout_seconds)
        state = _TurnState(messages=self.build_messages(request))

        try:
            token.throw_if_cancelled()
            reply = await deadline.run(
                self._model.complete(state.messages, tools=self._executor.registry.openai_tools())
            )
        except Exception as e:
            record_turn(request.mode, "failed", deadline.elapsed())
            logger.error("Decision call failed: %s", e)
            raise TurnFailedError(f"Decision call failed: {e}") from e

        try:
            if reply.tool_calls:
                async for event in self._run_tools(request, reply, state, deadline, token):
                    yield event
            else:
                async for event in self._enrich_videos(request, [], None, state, deadline):
                    yield event

            if state.smart_result is not None and not reply.tool_calls and request.mode == "ask":
                # In ask mode the smart answer stands in for the second model call
                for chunk in word_chunks(state.smart_result.ai_response):
                    state.chunks.append(chunk)
                    yield ContentEvent(content=chunk)
            else:
                async for event in self._stream_answer(state, deadline, token):
                    yield event

            if request.mode == "itinerary":
                itinerary = parse_itinerary("".join(state.chunks))
                if itinerary is not None:
                    yield ItineraryEvent(itinerary=itinerary)
        except (TurnDeadlineExceeded, ToolCancelledError) as e:
            record_turn(request.mode, "error", deadline.elapsed())
            logger.warning("Turn stopped early: %s", e)
            yield ErrorEvent(error=str(e))
            return
        except Exception as e:
            record_turn(request.mode, "error", deadline.elapsed())
            logger.exception("Turn failed after output started")
            yield ErrorEvent(error=str(e) or type(e).__name__)
            return

        record_turn(request.mode, "done", deadline.elapsed())
        yield DoneEvent(citations=extract_citations(state.tool_calls), chat_mode=request.mode)

    async def _run_tools(
        self,
        request: TurnRequest,
        reply: AssistantReply,
        state: _TurnState,
        deadline: TurnDeadline,
        token: CancelToken,
    ) -> AsyncIterator[ChatEvent]:
        state.messages.append(assistant_tool_call_message(reply))
        state.tool_calls = await deadline.run(self._executor.execute_all(reply.tool_calls, token))
        state.messages.extend(tool_result_message(call) for call in state.tool_calls)

        failed = [call.tool for call in state.tool_calls if not call.result.success]
        logger.info(
            "Executed %d tool call(s), %d failed %s",
            len(state.tool_calls),
            len(failed),
            failed or "",
        )
        yield ToolCallsEvent(tool_calls=state.tool_calls)

        cards = extract_cards(state.tool_calls)
        if cards:
            yield CardsEvent(cards=cards)

        tool_videos = videos_from_tool_calls(state.tool_calls)
        video_location = next(
            (
                call.parameters.get("location")
                for call in state.tool_calls
                if call.tool == VIDEO_TOOL and isinstance(call.parameters.get("location"), str)
            ),
            None,
        )
        enrichment = self._enrich_videos(request, tool_videos, video_location, state, deadline)
        async for event in enrichment:
            yield event

    async def _enrich_videos(
        self,
        request: TurnRequest,
        tool_videos: list[VideoResult],
        video_location: str | None,
        state: _TurnState,
        deadline: TurnDeadline,
    ) -> AsyncIterator[ChatEvent]:
        """Videos from the model's own search, else the smart -> single-query fallback chain."""
        destination = request.destination
        videos = tool_videos

        if videos:
            yield VideosEvent(videos=videos)
        elif destination and self._videos is not None:
            context = request.trip_context or TripContext(destination=destination)
            smart = await self._guarded(
                deadline,
                self._videos.smart_search(request.user_message, context),
                "smart_search",
            )
            if smart is not None and smart.videos:
                state.smart_result = smart
                yield VideosEvent(videos=[item.video for item in smart.videos])
                yield SmartVideoResultEvent(smart_video_result=smart)
                return

            videos = await self._guarded(
                deadline, self._videos.search(request.user_message, context), "search"
            ) or []
            if videos:
                yield VideosEvent(videos=videos)

        analysis_destination = destination or video_location
        if videos and analysis_destination and self._videos is not None:
            analysis = await self._guarded(
                deadline,
                self._videos.analyze_video(videos[0], analysis_destination),
                "analyze_video",
            )
            if analysis is not None:
                yield VideoAnalysisEvent(video_analysis=analysis)

    async def _guarded(
        self, deadline: TurnDeadline, awaitable: Awaitable[T], step: str
    ) -> T | None:
        """Enrichment step: any failure or deadline expiry skips it."""
        try:
            result = await deadline.run(awaitable)
        except TurnDeadlineExceeded:
            logger.warning("Skipping video %s: turn deadline reached", step)
            record_enrichment(step, "skipped_deadline")
        except Exception as e:
            logger.warning("Skipping video %s: %s", step, e)
            record_enrichment(step, "skipped_error")
        else:
            record_enrichment(step, "ok")
            return result
        return None

    async def _stream_answer(
        self,
        state: _TurnState,
        deadline: TurnDeadline,
        token: CancelToken,
    ) -> AsyncIterator[ChatEvent]:
        """Stream the answer call, forwarding chunks as they arrive."""
        stream = self._model.stream(state.messages)
        try:
            while True:
                token.throw_if_cancelled()
                try:
                    chunk = await deadline.run(anext(stream))
                except StopAsyncIteration:
                    break
                state.chunks.append(chunk)
                yield ContentEvent(content=chunk)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
