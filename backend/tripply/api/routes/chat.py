"""Chat endpoint - POST /chat/stream (Server-Sent Events)."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from backend.tripply.models.chat import Message, TripContext, TurnRequest
from backend.tripply.models.common import ChatMode
from backend.tripply.models.events import ErrorEvent
from backend.tripply.orchestration.chat import ChatOrchestrator, TurnFailedError
from backend.tripply.orchestration.transcript import TurnTranscript
from backend.tripply.tools.executor import CancelToken

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


class ChatStreamRequest(BaseModel):
    """Request body for POST /chat/stream."""

    message: str = Field(..., min_length=1, description="The new user message")
    messages: list[Message] = Field(default_factory=list, description="Prior conversation")
    chat_mode: ChatMode = "ask"
    trip_context: TripContext | None = None
    trip_id: str | None = None


def get_orchestrator(request: Request) -> ChatOrchestrator:
    """Process-wide orchestrator built at startup."""
    orchestrator: ChatOrchestrator = request.app.state.orchestrator
    return orchestrator


@router.post("/stream")
async def chat_stream(
    body: ChatStreamRequest,
    orchestrator: Annotated[ChatOrchestrator, Depends(get_orchestrator)],
) -> StreamingResponse:
    """Run one chat turn and stream its events.

    Each event is one `data: {json}` frame. A turn that fails before any
    output streams a single error frame.
    """
    turn = TurnRequest(
        prior_messages=body.messages,
        user_message=body.message,
        mode=body.chat_mode,
        trip_context=body.trip_context,
    )
    transcript = TurnTranscript(body.chat_mode, trip_id=body.trip_id)
    cancel_token = CancelToken()

    async def event_generator() -> AsyncGenerator[str, None]:
        """Generate SSE frames."""
        try:
            async for event in orchestrator.start_turn(turn, cancel_token):
                transcript.add(event)
                yield event.to_sse()
        except TurnFailedError as e:
            error = ErrorEvent(error=str(e))
            transcript.add(error)
            yield error.to_sse()
        finally:
            # Client disconnects land here too; stop any in-flight work
            cancel_token.cancel()
            logger.info(
                "Chat turn finished: mode=%s events=%d done=%s error=%s",
                body.chat_mode,
                len(transcript.events),
                transcript.done,
                transcript.error,
            )

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
