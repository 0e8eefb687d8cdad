"""Tests for the chat model clients.

All tests are deterministic and do not make real network calls.
"""

import json
from collections.abc import AsyncIterator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from backend.tripply.config import Settings
from backend.tripply.llm.client import (
    AssistantReply,
    DeterministicStubModel,
    OpenAIChatModel,
    assistant_tool_call_message,
    get_chat_model,
    tool_result_message,
)
from backend.tripply.models.chat import ToolCall, ToolCallRequest
from backend.tripply.models.common import Citation, ToolResult


def completion(content: str | None = None, tool_calls: list[Any] | None = None) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def function_call(call_id: str, name: str, arguments: str) -> SimpleNamespace:
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def chunk(delta: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=delta))])


async def stream_of(*chunks: SimpleNamespace) -> AsyncIterator[SimpleNamespace]:
    for c in chunks:
        yield c


@pytest.fixture
def openai_model() -> OpenAIChatModel:
    model = OpenAIChatModel(api_key="sk-test", model="gpt-4o")
    model.client = MagicMock()
    model.client.chat.completions.create = AsyncMock()
    return model


class TestDeterministicStubModel:
    @pytest.mark.asyncio
    async def test_never_requests_tools(self) -> None:
        reply = await DeterministicStubModel().complete(
            [{"role": "user", "content": "Best tapas?"}], tools=[{"type": "function"}]
        )

        assert reply.tool_calls == []
        assert 'You asked: "Best tapas?"' in reply.content

    @pytest.mark.asyncio
    async def test_json_mode_returns_empty_object(self) -> None:
        reply = await DeterministicStubModel().complete([], json_mode=True)

        assert json.loads(reply.content) == {}

    @pytest.mark.asyncio
    async def test_stream_reassembles_answer(self) -> None:
        model = DeterministicStubModel()
        messages = [{"role": "user", "content": "Hi"}]

        chunks = [c async for c in model.stream(messages)]

        assert len(chunks) > 1
        assert "".join(chunks) == (await model.complete(messages)).content


class TestOpenAIChatModel:
    @pytest.mark.asyncio
    async def test_complete_with_tools(self, openai_model: OpenAIChatModel) -> None:
        create = openai_model.client.chat.completions.create
        create.return_value = completion(
            None, [function_call("call_1", "get_weather", '{"location": "Lisbon"}')]
        )
        tools = [{"type": "function", "function": {"name": "get_weather"}}]

        reply = await openai_model.complete([{"role": "user", "content": "Weather?"}], tools=tools)

        assert reply.content == ""
        assert reply.tool_calls == [
            ToolCallRequest(id="call_1", name="get_weather", arguments='{"location": "Lisbon"}')
        ]
        kwargs = create.call_args.kwargs
        assert kwargs["tools"] == tools
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_complete_json_mode_and_overrides(self, openai_model: OpenAIChatModel) -> None:
        create = openai_model.client.chat.completions.create
        create.return_value = completion('{"summary": "ok"}')

        reply = await openai_model.complete(
            [], model="gpt-4o-mini", temperature=0.2, max_tokens=50, json_mode=True
        )

        assert reply.content == '{"summary": "ok"}'
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 50
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "tools" not in kwargs

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, openai_model: OpenAIChatModel) -> None:
        openai_model.client.chat.completions.create.side_effect = RuntimeError("503")

        with pytest.raises(RuntimeError, match="503"):
            await openai_model.complete([])

    @pytest.mark.asyncio
    async def test_stream_yields_non_empty_deltas(self, openai_model: OpenAIChatModel) -> None:
        create = openai_model.client.chat.completions.create
        create.return_value = stream_of(
            chunk("Hel"), chunk(None), SimpleNamespace(choices=[]), chunk("lo")
        )

        chunks = [c async for c in openai_model.stream([{"role": "user", "content": "Hi"}])]

        assert chunks == ["Hel", "lo"]
        assert create.call_args.kwargs["stream"] is True


class TestHistoryMessages:
    def test_assistant_tool_call_message(self) -> None:
        reply = AssistantReply(
            tool_calls=[ToolCallRequest(id="call_1", name="search_web", arguments='{"query": "x"}')]
        )

        message = assistant_tool_call_message(reply)

        assert message["role"] == "assistant"
        assert message["content"] is None
        assert message["tool_calls"][0] == {
            "id": "call_1",
            "type": "function",
            "function": {"name": "search_web", "arguments": '{"query": "x"}'},
        }

    def test_tool_result_message_omits_sources_and_timestamp(self) -> None:
        call = ToolCall(
            id="call_1",
            tool="search_web",
            parameters={"query": "x"},
            result=ToolResult.ok(
                [{"title": "Guide"}], sources=[Citation(url="https://a.example", title="A")]
            ),
        )

        message = tool_result_message(call)

        assert message["role"] == "tool"
        assert message["tool_call_id"] == "call_1"
        assert json.loads(message["content"]) == {
            "success": True,
            "data": [{"title": "Guide"}],
            "error": None,
            "details": None,
        }

    def test_failed_result_is_forwarded(self) -> None:
        call = ToolCall(id="c", tool="get_weather", result=ToolResult.failure("Tool get_weather timed out"))

        content = json.loads(tool_result_message(call)["content"])

        assert content["success"] is False
        assert content["error"] == "Tool get_weather timed out"


class TestFactory:
    def test_stub_without_key(self, settings: Settings) -> None:
        assert isinstance(get_chat_model(settings), DeterministicStubModel)

    def test_openai_with_key(self, settings: Settings) -> None:
        keyed = settings.model_copy(update={"openai_api_key": SecretStr("sk-test")})

        model = get_chat_model(keyed)

        assert isinstance(model, OpenAIChatModel)
        assert model.model == settings.openai_model
