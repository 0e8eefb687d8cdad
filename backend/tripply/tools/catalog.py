"""Default tool catalog - binds the declared tools to their adapters."""

import httpx

from backend.tripply.adapters.events import search_events
from backend.tripply.adapters.hotels import search_hotel_offers
from backend.tripply.adapters.places import (
    calculate_travel_time,
    get_place_details,
    search_places,
)
from backend.tripply.adapters.reddit import RedditClient
from backend.tripply.adapters.search import search_web
from backend.tripply.adapters.weather import fetch_weather
from backend.tripply.config import Settings, secret_value
from backend.tripply.models.common import ToolResult
from backend.tripply.tools.params import (
    CalculateTravelTimeParams,
    GetPlaceDetailsParams,
    GetWeatherParams,
    SearchEventsParams,
    SearchHotelOffersParams,
    SearchPlacesParams,
    SearchRedditParams,
    SearchVideosParams,
    SearchWebParams,
)
from backend.tripply.tools.registry import ToolRegistry
from backend.tripply.video.pipeline import VideoPipeline

TOOL_DESCRIPTIONS = {
    "search_web": (
        "Search the web for travel information, reviews, guides and tips. "
        "Use for general questions that need current information."
    ),
    "get_weather": (
        "Get the weather forecast for a location. Use when planning activities "
        "or when the user asks about weather or what to pack."
    ),
    "search_places": (
        "Search for hotels, restaurants, attractions, cafes and bars in a location. "
        "Returns ratings, prices and photos."
    ),
    "get_place_details": (
        "Get detailed information about a specific place: opening hours, "
        "contact details, website and photos."
    ),
    "search_events": "Search for upcoming events, concerts, shows and activities in a location.",
    "calculate_travel_time": (
        "Calculate travel time and distance between two locations. "
        "Use for itinerary planning and route optimization."
    ),
    "search_hotel_offers": (
        "Search bookable hotel offers with live prices for specific check-in and "
        "check-out dates. Use when the user wants to book or compare hotel prices."
    ),
    "search_reddit": (
        "Search r/travel for first-hand traveler discussions, tips and warnings "
        "about a destination."
    ),
    "search_videos": (
        "Search travel videos about a destination. Use when the user asks for "
        "videos, vlogs or visual guides."
    ),
}


def build_default_registry(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    video_pipeline: VideoPipeline | None = None,
    reddit_client: RedditClient | None = None,
) -> ToolRegistry:
    """Register every declared tool, with keys taken from settings.

    Args:
        settings: API keys for the adapters
        http_client: Shared client (optional; adapters open their own otherwise)
        video_pipeline: Backs `search_videos` (optional; the tool reports unavailable)
        reddit_client: Backs `search_reddit` (optional; built from settings)

    Returns:
        Registry in declaration order
    """
    places_key = secret_value(settings.google_places_api_key)
    reddit = reddit_client or RedditClient(
        settings.reddit_client_id,
        secret_value(settings.reddit_client_secret),
        settings.reddit_user_agent,
        client=http_client,
    )

    async def _search_web(params: SearchWebParams) -> ToolResult:
        return await search_web(
            params,
            secret_value(settings.google_search_api_key),
            settings.google_search_engine_id,
            client=http_client,
        )

    async def _get_weather(params: GetWeatherParams) -> ToolResult:
        return await fetch_weather(params, client=http_client)

    async def _search_places(params: SearchPlacesParams) -> ToolResult:
        return await search_places(params, places_key, client=http_client)

    async def _get_place_details(params: GetPlaceDetailsParams) -> ToolResult:
        return await get_place_details(params, places_key, client=http_client)

    async def _search_events(params: SearchEventsParams) -> ToolResult:
        return await search_events(
            params, secret_value(settings.ticketmaster_api_key), client=http_client
        )

    async def _calculate_travel_time(params: CalculateTravelTimeParams) -> ToolResult:
        return await calculate_travel_time(params, places_key, client=http_client)

    async def _search_hotel_offers(params: SearchHotelOffersParams) -> ToolResult:
        return await search_hotel_offers(
            params, secret_value(settings.serpapi_api_key), client=http_client
        )

    async def _search_reddit(params: SearchRedditParams) -> ToolResult:
        return await reddit.search(params)

    async def _search_videos(params: SearchVideosParams) -> ToolResult:
        if video_pipeline is None:
            return ToolResult.failure("Video search is not configured")
        return await video_pipeline.search_videos_tool(params)

    registry = ToolRegistry()
    bindings = [
        ("search_web", SearchWebParams, _search_web),
        ("get_weather", GetWeatherParams, _get_weather),
        ("search_places", SearchPlacesParams, _search_places),
        ("get_place_details", GetPlaceDetailsParams, _get_place_details),
        ("search_events", SearchEventsParams, _search_events),
        ("calculate_travel_time", CalculateTravelTimeParams, _calculate_travel_time),
        ("search_hotel_offers", SearchHotelOffersParams, _search_hotel_offers),
        ("search_reddit", SearchRedditParams, _search_reddit),
        ("search_videos", SearchVideosParams, _search_videos),
    ]
    for name, params_model, fn in bindings:
        registry.register(name, TOOL_DESCRIPTIONS[name], params_model, fn)
    return registry
