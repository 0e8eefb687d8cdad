"""Chat model client with OpenAI integration.

Security: API key comes from Settings only, never hardcoded.
Provides a deterministic stub when no key is present (local runs, tests).
"""

import json
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from openai import AsyncOpenAI

from backend.tripply.config import Settings, secret_value
from backend.tripply.models.chat import ToolCall, ToolCallRequest

logger = logging.getLogger(__name__)

ChatMessage = dict[str, Any]


@dataclass
class AssistantReply:
    """Non-streaming completion: text and any requested tool calls."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)


class ChatModel(Protocol):
    """Protocol for chat-completion providers."""

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> AssistantReply:
        """Run one non-streaming completion.

        Args:
            messages: OpenAI-format conversation
            tools: Function declarations; tool choice is automatic when given
            model: Model override (defaults to the client's main model)
            temperature: Sampling temperature
            max_tokens: Completion token cap
            json_mode: Ask for a JSON object response

        Returns:
            AssistantReply with content and requested tool calls
        """
        ...

    def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Stream text deltas as they arrive."""
        ...


def assistant_tool_call_message(reply: AssistantReply) -> ChatMessage:
    """History entry replaying the model's tool-call request."""
    return {
        "role": "assistant",
        "content": reply.content or None,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments},
            }
            for call in reply.tool_calls
        ],
    }


def tool_result_message(call: ToolCall) -> ChatMessage:
    """History entry carrying one settled tool result back to the model.

    Failed results are forwarded too, so the model can say a lookup failed.
    """
    payload = call.result.model_dump(mode="json", exclude={"timestamp", "sources"})
    return {
        "role": "tool",
        "tool_call_id": call.id,
        "content": json.dumps(payload),
    }


class DeterministicStubModel:
    """Deterministic stub model for testing (no API key required)."""

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> AssistantReply:
        """Never requests tools; echoes the last user message."""
        if json_mode:
            return AssistantReply(content="{}")
        return AssistantReply(content=self._answer(messages))

    async def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Yield the stub answer word by word."""
        words = self._answer(messages).split(" ")
        for i, word in enumerate(words):
            yield word if i == len(words) - 1 else word + " "

    @staticmethod
    def _answer(messages: Sequence[ChatMessage]) -> str:
        question = next(
            (m.get("content") for m in reversed(messages) if m.get("role") == "user"), ""
        )
        return (
            f'You asked: "{question}". '
            "This is a placeholder answer generated without a language model."
        )


class OpenAIChatModel:
    """OpenAI-backed chat model."""

    def __init__(self, api_key: str, model: str = "gpt-4o", timeout: float = 60.0):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (from Settings)
            model: Default model name
            timeout: Request timeout in seconds
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> AssistantReply:
        """Run a completion; provider errors propagate to the caller."""
        kwargs: dict[str, Any] = {
            "model": model or self.model,
            "messages": list(messages),
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**kwargs)
        message = response.choices[0].message

        tool_calls = [
            ToolCallRequest(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "{}",
            )
            for call in (message.tool_calls or [])
            if call.type == "function"
        ]
        return AssistantReply(content=message.content or "", tool_calls=tool_calls)

    async def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Stream content deltas in provider order."""
        kwargs: dict[str, Any] = {
            "model": model or self.model,
            "messages": list(messages),
            "temperature": temperature,
            "stream": True,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        response = await self.client.chat.completions.create(**kwargs)
        async for chunk in response:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta


def get_chat_model(settings: Settings) -> ChatModel:
    """Factory function to get the appropriate chat model for the settings.

    Returns:
        OpenAIChatModel if an API key is configured, DeterministicStubModel otherwise
    """
    api_key = secret_value(settings.openai_api_key)

    if api_key:
        logger.info("Using OpenAI chat model %s", settings.openai_model)
        return OpenAIChatModel(api_key=api_key, model=settings.openai_model)

    logger.warning("No OpenAI API key configured, using deterministic stub model")
    return DeterministicStubModel()
