"""Google Places adapter - text search, place details and travel time.

Requires a Google Places API key; without one every call fails as data.
"""

import logging
from typing import Any

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import Coordinates, ToolResult
from backend.tripply.models.tool_results import PlaceResult, TravelTimeResult
from backend.tripply.tools.params import (
    CalculateTravelTimeParams,
    GetPlaceDetailsParams,
    SearchPlacesParams,
)

logger = logging.getLogger(__name__)

PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

NOT_CONFIGURED = "Google Places API key not configured"

MAX_PLACES = 20
MAX_PHOTOS = 5

# Google type used to narrow a text search for each requested place type
PLACE_TYPE_FILTERS: dict[str, str] = {
    "hotel": "lodging",
    "restaurant": "restaurant",
    "attraction": "tourist_attraction",
    "cafe": "cafe",
    "bar": "bar",
}

# An "all" search keeps only places with at least one of these types...
TRAVEL_RELEVANT_TYPES = frozenset(
    {
        "tourist_attraction",
        "museum",
        "art_gallery",
        "aquarium",
        "amusement_park",
        "zoo",
        "park",
        "natural_feature",
        "lodging",
        "hotel",
        "restaurant",
        "cafe",
        "bar",
        "night_club",
        "food",
        "shopping_mall",
        "spa",
        "stadium",
        "church",
        "hindu_temple",
        "mosque",
        "synagogue",
        "place_of_worship",
        "point_of_interest",
    }
)

# ...and none of these
EXCLUDED_TYPES = frozenset(
    {
        "car_dealer",
        "car_rental",
        "car_repair",
        "gas_station",
        "parking",
        "transit_station",
        "bus_station",
        "train_station",
        "subway_station",
        "airport",
        "local_government_office",
        "courthouse",
        "embassy",
        "city_hall",
        "police",
        "post_office",
        "funeral_home",
        "cemetery",
        "insurance_agency",
        "real_estate_agency",
        "lawyer",
        "accounting",
        "atm",
        "bank",
        "pharmacy",
        "doctor",
        "dentist",
        "hospital",
        "school",
        "university",
    }
)

DETAIL_FIELDS = (
    "name,formatted_address,geometry,rating,user_ratings_total,price_level,photos,"
    "opening_hours,website,formatted_phone_number,types,editorial_summary,url"
)


def photo_url(reference: str, max_width: int = 800) -> str:
    """Photo endpoint for a Places photo reference (key appended by the UI proxy)."""
    return f"{PLACES_BASE_URL}/photo?maxwidth={max_width}&photo_reference={reference}"


def maps_url(place_id: str) -> str:
    return f"https://www.google.com/maps/place/?q=place_id:{place_id}"


def _place_from_google(raw: dict[str, Any], photo_width: int = 800) -> PlaceResult:
    place_id = raw.get("place_id")
    location = (raw.get("geometry") or {}).get("location")
    hours = (raw.get("opening_hours") or {}).get("weekday_text")
    return PlaceResult(
        place_id=place_id,
        name=raw["name"],
        address=raw.get("formatted_address"),
        coordinates=Coordinates(lat=location["lat"], lng=location["lng"]) if location else None,
        rating=raw.get("rating"),
        review_count=raw.get("user_ratings_total"),
        price_level=raw.get("price_level"),
        types=raw.get("types") or [],
        photos=[
            photo_url(photo["photo_reference"], photo_width)
            for photo in (raw.get("photos") or [])[:MAX_PHOTOS]
            if photo.get("photo_reference")
        ],
        opening_hours=", ".join(hours) if hours else None,
        url=raw.get("url") or (maps_url(place_id) if place_id else None),
        phone=raw.get("formatted_phone_number"),
        website=raw.get("website"),
        editorial_summary=(raw.get("editorial_summary") or {}).get("overview"),
    )


def is_travel_relevant(types: list[str]) -> bool:
    """True if a place's types mark it as something a traveler would visit."""
    if any(t in EXCLUDED_TYPES for t in types):
        return False
    return any(t in TRAVEL_RELEVANT_TYPES for t in types)


async def search_places(
    params: SearchPlacesParams,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[list[PlaceResult]]:
    """Search places near a location with Google Places text search.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    if not api_key:
        return ToolResult.failure(NOT_CONFIGURED)

    async with http_client(client) as http:
        geocode = await http.get(GEOCODE_URL, params={"address": params.location, "key": api_key})
        geocode.raise_for_status()
        geocode_data = geocode.json()
        if geocode_data.get("status") != "OK" or not geocode_data.get("results"):
            return ToolResult.failure(f"Could not geocode location: {params.location}")
        center = geocode_data["results"][0]["geometry"]["location"]

        query: dict[str, str | int] = {
            "query": f"{params.query} in {params.location}",
            "location": f"{center['lat']},{center['lng']}",
            "radius": params.radius,
            "key": api_key,
        }
        if params.type in PLACE_TYPE_FILTERS:
            query["type"] = PLACE_TYPE_FILTERS[params.type]

        response = await http.get(f"{PLACES_BASE_URL}/textsearch/json", params=query)
        response.raise_for_status()
        data = response.json()

    status = data.get("status")
    if status not in ("OK", "ZERO_RESULTS"):
        return ToolResult.failure(f"Places API error: {status}")

    places = [_place_from_google(raw) for raw in data.get("results") or []]

    if params.type == "all":
        places = [p for p in places if is_travel_relevant(p.types)]
    if params.min_rating:
        places = [p for p in places if p.rating and p.rating >= params.min_rating]
    if params.price_level:
        places = [p for p in places if p.price_level in params.price_level]
    places = places[:MAX_PLACES]

    return ToolResult.ok(
        places,
        sources=[
            citation_for_http(
                "Google Places",
                "https://maps.google.com",
                snippet=f'Found {len(places)} places matching "{params.query}" in {params.location}',
                confidence=0.95,
            )
        ],
    )


async def get_place_details(
    params: GetPlaceDetailsParams,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[PlaceResult]:
    """Fetch details for one place."""
    if not api_key:
        return ToolResult.failure(NOT_CONFIGURED)

    async with http_client(client) as http:
        response = await http.get(
            f"{PLACES_BASE_URL}/details/json",
            params={"place_id": params.place_id, "fields": DETAIL_FIELDS, "key": api_key},
        )
        response.raise_for_status()
        data = response.json()

    if data.get("status") != "OK":
        return ToolResult.failure(f"Place details error: {data.get('status')}")

    raw = {"place_id": params.place_id, **data["result"]}
    place = _place_from_google(raw, photo_width=1200)
    return ToolResult.ok(
        place,
        sources=[
            citation_for_http(
                place.name,
                place.website or place.url or maps_url(params.place_id),
                snippet=place.address,
            )
        ],
    )


async def calculate_travel_time(
    params: CalculateTravelTimeParams,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[TravelTimeResult]:
    """Distance and duration between two points via the Distance Matrix API."""
    if not api_key:
        return ToolResult.failure(NOT_CONFIGURED)

    query: dict[str, str | int] = {
        "origins": params.origin,
        "destinations": params.destination,
        "mode": params.mode,
        "key": api_key,
    }
    if params.departure_time:
        query["departure_time"] = int(params.departure_time.timestamp())

    async with http_client(client) as http:
        response = await http.get(DISTANCE_MATRIX_URL, params=query)
        response.raise_for_status()
        data = response.json()

    rows = data.get("rows") or []
    elements = rows[0].get("elements") if rows else None
    if data.get("status") != "OK" or not elements:
        return ToolResult.failure(f"Distance Matrix API error: {data.get('status')}")

    element = elements[0]
    if element.get("status") != "OK":
        return ToolResult.failure(f"Could not calculate route: {element.get('status')}")

    result = TravelTimeResult(
        origin=params.origin,
        destination=params.destination,
        mode=params.mode,
        distance_meters=element["distance"]["value"],
        duration_seconds=element["duration"]["value"],
        distance_text=element["distance"].get("text"),
        duration_text=element["duration"].get("text"),
    )
    return ToolResult.ok(
        result,
        sources=[
            citation_for_http(
                "Google Distance Matrix",
                "https://maps.google.com",
                snippet=f"{result.distance_text} via {params.mode}",
                confidence=0.95,
            )
        ],
    )
