"""Tests for the video enrichment pipeline with a scripted model and provider."""

import json
from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest

from backend.tripply.config import Settings
from backend.tripply.llm.client import AssistantReply, ChatMessage
from backend.tripply.models.chat import TripContext
from backend.tripply.models.video import VideoResult
from backend.tripply.tools.executor import ToolConfigurationError
from backend.tripply.tools.params import SearchVideosParams
from backend.tripply.video import prompts
from backend.tripply.video.pipeline import (
    VideoPipeline,
    fallback_natural_response,
    fallback_query,
)

STEP_PREFIXES = {
    "query": prompts.SEARCH_QUERY_SYSTEM[:40],
    "titles": prompts.SEARCH_TITLES_SYSTEM[:40],
    "relevance": prompts.RELEVANCE_SYSTEM[:40],
    "analysis": prompts.ANALYSIS_SYSTEM[:30],
    "deep": prompts.DEEP_ANALYSIS_SYSTEM[:40],
    "natural": prompts.NATURAL_RESPONSE_SYSTEM[:40],
}

LONG_TRANSCRIPT = "Start at the castle early to beat the crowds. " * 5


class ScriptedModel:
    """Answers each pipeline step from a script keyed by step name."""

    def __init__(self, script: dict[str, str | Exception]) -> None:
        self.script = script
        self.calls: list[tuple[str, list[ChatMessage], dict[str, Any]]] = []

    async def complete(self, messages: Sequence[ChatMessage], **kwargs: Any) -> AssistantReply:
        system = messages[0]["content"]
        step = next(name for name, prefix in STEP_PREFIXES.items() if system.startswith(prefix))
        self.calls.append((step, list(messages), kwargs))
        answer = self.script.get(step, "")
        if isinstance(answer, Exception):
            raise answer
        return AssistantReply(content=answer)

    async def stream(self, messages: Sequence[ChatMessage], **kwargs: Any) -> AsyncIterator[str]:
        raise AssertionError("the pipeline never streams")
        yield  # pragma: no cover

    def steps(self) -> list[str]:
        return [step for step, _, _ in self.calls]


class FakeProvider:
    def __init__(
        self,
        results: dict[str, list[VideoResult] | Exception] | None = None,
        default: list[VideoResult] | Exception | None = None,
    ) -> None:
        self.results = results or {}
        self.default = default or []
        self.searches: list[tuple[str, int, str]] = []

    async def search(
        self, query: str, max_results: int = 10, video_duration: str = "any"
    ) -> list[VideoResult]:
        self.searches.append((query, max_results, video_duration))
        result = self.results.get(query, self.default)
        if isinstance(result, Exception):
            raise result
        return result


class FakeTranscripts:
    def __init__(self, texts: dict[str, str]) -> None:
        self.texts = texts

    async def fetch(self, video_id: str) -> str:
        return self.texts.get(video_id, "")


def video(video_id: str, title: str) -> VideoResult:
    return VideoResult(video_id=video_id, title=title, channel_title="Travel Channel")


LISBON_VIDEOS = [
    video("v1", "Lisbon food tour"),
    video("v2", "Paris in 4K"),
    video("v3", "Lisbon hidden gems"),
]


def make_pipeline(
    settings: Settings,
    model: ScriptedModel,
    provider: FakeProvider,
    transcripts: FakeTranscripts | None = None,
) -> VideoPipeline:
    return VideoPipeline(model, provider, transcripts, settings)


class TestQueryGeneration:
    @pytest.mark.asyncio
    async def test_strips_quotes(self, settings: Settings) -> None:
        model = ScriptedModel({"query": '"lisbon food tour 2025"'})
        pipeline = make_pipeline(settings, model, FakeProvider())

        query = await pipeline.generate_search_query("where to eat?", "Lisbon", "Portugal", "couple")

        assert query == "lisbon food tour 2025"
        _, messages, kwargs = model.calls[0]
        assert "Location: Lisbon, Portugal" in messages[1]["content"]
        assert "Traveler type: couple" in messages[1]["content"]
        assert kwargs["model"] == settings.openai_fast_model

    @pytest.mark.asyncio
    async def test_falls_back_on_failure(self, settings: Settings) -> None:
        model = ScriptedModel({"query": RuntimeError("rate limited")})
        pipeline = make_pipeline(settings, model, FakeProvider())

        assert await pipeline.generate_search_query("food?", "Lisbon") == fallback_query("Lisbon")

    @pytest.mark.asyncio
    async def test_falls_back_on_empty_answer(self, settings: Settings) -> None:
        pipeline = make_pipeline(settings, ScriptedModel({"query": '  ""  '}), FakeProvider())

        assert await pipeline.generate_search_query("food?", "Lisbon") == "Lisbon travel guide"


class TestSearchTitles:
    @pytest.mark.asyncio
    async def test_parses_fenced_array_dedupes_and_caps(self, settings: Settings) -> None:
        titles = ["lisbon food", "lisbon food", "alfama walk", "belem", "sintra", "cascais", "porto"]
        model = ScriptedModel({"titles": "```json\n" + json.dumps(titles) + "\n```"})
        pipeline = make_pipeline(settings, model, FakeProvider())

        result = await pipeline.extract_search_titles("what to do?", "Lisbon")

        assert result == ["lisbon food", "alfama walk", "belem", "sintra", "cascais"]

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self, settings: Settings) -> None:
        pipeline = make_pipeline(settings, ScriptedModel({"titles": "lisbon food"}), FakeProvider())

        assert await pipeline.extract_search_titles("what to do?", "Lisbon") == ["Lisbon travel guide"]


class TestRelevanceFilter:
    @pytest.mark.asyncio
    async def test_small_sets_skip_the_model(self, settings: Settings) -> None:
        model = ScriptedModel({})
        pipeline = make_pipeline(settings, model, FakeProvider())

        result = await pipeline.filter_by_ai_relevance(LISBON_VIDEOS, "food", "Lisbon", limit=4)

        assert result == LISBON_VIDEOS
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_ranked_order(self, settings: Settings) -> None:
        videos = [video(f"v{i}", f"Lisbon {i}") for i in range(6)]
        pipeline = make_pipeline(settings, ScriptedModel({"relevance": "5,3"}), FakeProvider())

        result = await pipeline.filter_by_ai_relevance(videos, "food", "Lisbon", limit=2)

        assert [v.video_id for v in result] == ["v5", "v3"]

    @pytest.mark.asyncio
    async def test_failure_keeps_provider_order(self, settings: Settings) -> None:
        videos = [video(f"v{i}", f"Lisbon {i}") for i in range(6)]
        pipeline = make_pipeline(
            settings, ScriptedModel({"relevance": RuntimeError("down")}), FakeProvider()
        )

        result = await pipeline.filter_by_ai_relevance(videos, "food", "Lisbon", limit=3)

        assert [v.video_id for v in result] == ["v0", "v1", "v2"]


class TestAnalysis:
    @pytest.mark.asyncio
    async def test_transcript_grounded_analysis(self, settings: Settings) -> None:
        answer = {
            "summary": "A tour of Lisbon's best tascas.",
            "highlights": ["Bifana at O Trevo"],
            "places": [
                {"name": "O Trevo", "type": "restaurant", "note": "bifana"},
                {"name": "Miradouro", "type": "viewpoint"},
                {"note": "nameless"},
            ],
        }
        model = ScriptedModel({"analysis": json.dumps(answer)})
        pipeline = make_pipeline(
            settings, model, FakeProvider(), FakeTranscripts({"v1": LONG_TRANSCRIPT})
        )

        analysis = await pipeline.analyze_video(LISBON_VIDEOS[0], "Lisbon")

        assert analysis.video_id == "v1"
        assert analysis.summary == "A tour of Lisbon's best tascas."
        assert analysis.highlights == ["Bifana at O Trevo"]
        assert [(p.name, p.type) for p in analysis.places] == [
            ("O Trevo", "restaurant"),
            ("Miradouro", "other"),
        ]
        _, messages, kwargs = model.calls[0]
        assert prompts.TRANSCRIPT_NOTE in messages[0]["content"]
        assert "Transcript:" in messages[1]["content"]
        assert kwargs["json_mode"] is True

    @pytest.mark.asyncio
    async def test_short_transcript_is_ignored(self, settings: Settings) -> None:
        model = ScriptedModel({"analysis": '{"summary": "ok"}'})
        pipeline = make_pipeline(settings, model, FakeProvider(), FakeTranscripts({"v1": "[Music]"}))

        await pipeline.analyze_video(LISBON_VIDEOS[0], "Lisbon")

        _, messages, _ = model.calls[0]
        assert prompts.NO_TRANSCRIPT_NOTE in messages[0]["content"]
        assert "No transcript available" in messages[1]["content"]

    @pytest.mark.asyncio
    async def test_failure_uses_fallback_summary(self, settings: Settings) -> None:
        pipeline = make_pipeline(settings, ScriptedModel({"analysis": "not json"}), FakeProvider())

        analysis = await pipeline.analyze_video(LISBON_VIDEOS[0], "Lisbon")

        assert analysis.summary == "Travel insights about Lisbon: Lisbon food tour"
        assert analysis.highlights == []

    @pytest.mark.asyncio
    async def test_deep_analysis_fields(self, settings: Settings) -> None:
        answer = {
            "summary": "Practical Lisbon tips.",
            "thingsToDo": ["Ride tram 28 early"],
            "thingsToAvoid": ["Restaurants with picture menus"],
            "tips": ["Buy a Viva Viagem card"],
            "places": [{"name": "Tram 28", "type": "attraction"}],
        }
        pipeline = make_pipeline(
            settings,
            ScriptedModel({"deep": json.dumps(answer)}),
            FakeProvider(),
            FakeTranscripts({"v1": LONG_TRANSCRIPT}),
        )

        deep = await pipeline.deep_analyze_video(LISBON_VIDEOS[0], "Lisbon", "tips?")

        assert deep.things_to_do == ["Ride tram 28 early"]
        assert deep.things_to_avoid == ["Restaurants with picture menus"]
        assert deep.tips == ["Buy a Viva Viagem card"]
        assert deep.has_transcript is True


class TestSearch:
    @pytest.mark.asyncio
    async def test_single_query_path(self, settings: Settings) -> None:
        provider = FakeProvider({"lisbon eats": LISBON_VIDEOS})
        pipeline = make_pipeline(settings, ScriptedModel({"query": "lisbon eats"}), provider)

        videos = await pipeline.search("where to eat?", TripContext(destination="Lisbon"))

        assert [v.video_id for v in videos] == ["v1", "v3"]
        assert provider.searches == [("lisbon eats", settings.video_candidates_per_query, "any")]

    @pytest.mark.asyncio
    async def test_no_destination_no_videos(self, settings: Settings) -> None:
        model = ScriptedModel({})
        pipeline = make_pipeline(settings, model, FakeProvider(default=LISBON_VIDEOS))

        assert await pipeline.search("where to eat?", TripContext()) == []
        assert await pipeline.smart_search("where to eat?", TripContext()) is None
        assert model.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_yields_no_videos(self, settings: Settings) -> None:
        provider = FakeProvider({"lisbon eats": RuntimeError("quota exceeded")})
        pipeline = make_pipeline(settings, ScriptedModel({"query": "lisbon eats"}), provider)

        assert await pipeline.search("where to eat?", TripContext(destination="Lisbon")) == []


class TestSmartSearch:
    @pytest.mark.asyncio
    async def test_multi_topic_answer(self, settings: Settings) -> None:
        provider = FakeProvider(
            {
                "lisbon food": [LISBON_VIDEOS[0], LISBON_VIDEOS[1]],
                "alfama walk": [LISBON_VIDEOS[0], LISBON_VIDEOS[2]],
                "sintra": RuntimeError("quota exceeded"),
            }
        )
        model = ScriptedModel(
            {
                "titles": json.dumps(["lisbon food", "alfama walk", "sintra"]),
                "deep": json.dumps({"summary": "Great tips", "tips": ["Go early"]}),
                "natural": "## Quick answer\nEat bifanas.",
            }
        )
        pipeline = make_pipeline(settings, model, provider)

        result = await pipeline.smart_search("what to do?", TripContext(destination="Lisbon"))

        assert result is not None
        assert result.ai_response == "## Quick answer\nEat bifanas."
        assert result.search_titles == ["lisbon food", "alfama walk", "sintra"]
        assert [item.video.video_id for item in result.videos] == ["v1", "v3"]
        assert all(item.analysis and item.analysis.tips == ["Go early"] for item in result.videos)
        assert {duration for _, _, duration in provider.searches} == {"medium"}
        assert model.steps()[-1] == "natural"

    @pytest.mark.asyncio
    async def test_nothing_in_city_returns_none(self, settings: Settings) -> None:
        provider = FakeProvider(default=[video("x", "Madrid tapas")])
        model = ScriptedModel({"titles": '["madrid"]'})
        pipeline = make_pipeline(settings, model, provider)

        assert await pipeline.smart_search("food?", TripContext(destination="Lisbon")) is None
        assert "natural" not in model.steps()

    @pytest.mark.asyncio
    async def test_synthesis_failure_uses_apology(self, settings: Settings) -> None:
        provider = FakeProvider(default=[LISBON_VIDEOS[0]])
        model = ScriptedModel({"titles": '["lisbon"]', "natural": RuntimeError("down")})
        pipeline = make_pipeline(settings, model, provider)

        result = await pipeline.smart_search("food?", TripContext(destination="Lisbon"))

        assert result is not None
        assert result.ai_response == fallback_natural_response("Lisbon")


class TestSearchVideosTool:
    @pytest.mark.asyncio
    async def test_returns_videos_with_citations(self, settings: Settings) -> None:
        provider = FakeProvider({"lisbon eats": LISBON_VIDEOS})
        pipeline = make_pipeline(settings, ScriptedModel({"query": "lisbon eats"}), provider)

        result = await pipeline.search_videos_tool(SearchVideosParams(query="food", location="Lisbon"))

        assert result.success is True
        assert [v.video_id for v in result.data or []] == ["v1", "v3"]
        assert [s.url for s in result.sources] == [
            "https://www.youtube.com/watch?v=v1",
            "https://www.youtube.com/watch?v=v3",
        ]

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_a_failure(self, settings: Settings) -> None:
        provider = FakeProvider(default=ToolConfigurationError("YouTube API key not configured"))
        pipeline = make_pipeline(settings, ScriptedModel({"query": "q"}), provider)

        result = await pipeline.search_videos_tool(SearchVideosParams(query="food", location="Lisbon"))

        assert result.success is False
        assert result.error == "YouTube API key not configured"
