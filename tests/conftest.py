"""Shared pytest fixtures for all test suites."""

import pytest

from backend.tripply.config import Settings
from backend.tripply.models.common import Citation, ToolResult
from backend.tripply.tools.params import SearchPlacesParams, SearchWebParams
from backend.tripply.tools.registry import ToolRegistry


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        openai_api_key=None,
        youtube_api_key=None,
        google_places_api_key=None,
        turn_timeout_seconds=5.0,
        tool_timeout_ms=1000,
    )


@pytest.fixture
def web_citation() -> Citation:
    return Citation(url="https://example.com/guide", title="Lisbon guide", snippet="Top tips")


@pytest.fixture
def fake_registry(web_citation: Citation) -> ToolRegistry:
    """Registry with in-process search_web and search_places implementations."""
    registry = ToolRegistry()

    async def fake_search_web(params: SearchWebParams) -> ToolResult:
        return ToolResult.ok(
            [{"title": f"Result for {params.query}", "url": web_citation.url}],
            sources=[web_citation],
        )

    async def fake_search_places(params: SearchPlacesParams) -> ToolResult:
        places = [
            {
                "place_id": f"place-{i}",
                "name": f"{params.query.title()} {i}",
                "types": ["restaurant", "portuguese_restaurant"],
                "rating": 4.5,
            }
            for i in range(8)
        ]
        return ToolResult.ok(
            places,
            sources=[Citation(url="https://maps.google.com", title="Google Places")],
        )

    registry.register("search_web", "Search the web", SearchWebParams, fake_search_web)
    registry.register("search_places", "Search places", SearchPlacesParams, fake_search_places)
    return registry
