"""Tool result models - external data shapes, one per tool."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from backend.tripply.models.common import Coordinates
from backend.tripply.models.video import VideoResult


class PlaceResult(BaseModel):
    """Place search or details result."""

    place_id: str | None = None
    name: str
    address: str | None = None
    coordinates: Coordinates | None = None
    rating: float | None = None
    review_count: int | None = None
    price_level: int | None = Field(None, ge=0, le=4)
    types: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    opening_hours: str | None = None
    url: str | None = None
    phone: str | None = None
    website: str | None = None
    editorial_summary: str | None = None


class WeatherDay(BaseModel):
    """Daily weather forecast."""

    date: date
    high_c: float
    low_c: float
    condition: str
    rain_chance: float = Field(..., ge=0.0, le=1.0)
    wind_kmh: float | None = None


class WeatherReport(BaseModel):
    """Forecast for a resolved location."""

    location: str
    coordinates: Coordinates
    forecast: list[WeatherDay]


class HotelOffer(BaseModel):
    """Bookable hotel offer."""

    id: str | None = None
    name: str
    address: str | None = None
    coordinates: Coordinates | None = None
    rating: float | None = None
    review_count: int | None = None
    price_per_night: float | None = None
    total_price: float | None = None
    currency: str = "USD"
    amenities: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    check_in_date: date | None = None
    check_out_date: date | None = None
    url: str | None = None


class EventResult(BaseModel):
    """Local event (concert, festival, game...)."""

    id: str | None = None
    name: str
    start_date: date | None = None
    venue: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None
    price: float | None = None
    category: str = "Event"
    url: str | None = None
    image: str | None = None


class WebResult(BaseModel):
    """Web search hit."""

    title: str
    url: str
    snippet: str = ""
    source: str = ""


class RedditPost(BaseModel):
    """Post from a travel subreddit."""

    id: str
    title: str
    selftext: str = ""
    score: int = 0
    num_comments: int = 0
    url: str | None = None
    permalink: str
    created_at: datetime
    author: str | None = None


class TravelTimeResult(BaseModel):
    """Distance and duration between two points."""

    origin: str
    destination: str
    mode: str
    distance_meters: int
    duration_seconds: int
    distance_text: str | None = None
    duration_text: str | None = None


# Payload type per tool name; a successful result's `data` has this shape
TOOL_PAYLOAD_TYPES: dict[str, Any] = {
    "search_web": list[WebResult],
    "get_weather": WeatherReport,
    "search_places": list[PlaceResult],
    "get_place_details": PlaceResult,
    "search_events": list[EventResult],
    "calculate_travel_time": TravelTimeResult,
    "search_hotel_offers": list[HotelOffer],
    "search_reddit": list[RedditPost],
    "search_videos": list[VideoResult],
}

_PAYLOAD_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    tool: TypeAdapter(payload_type) for tool, payload_type in TOOL_PAYLOAD_TYPES.items()
}


def parse_payload(tool: str, data: Any) -> Any:
    """Coerce a tool's result data into its typed payload.

    Accepts model instances (in-process results) or plain JSON data (replayed
    history).

    Raises:
        KeyError: If the tool has no declared payload type
        pydantic.ValidationError: If the data does not match it
    """
    return _PAYLOAD_ADAPTERS[tool].validate_python(data)
