"""Events adapter using the Ticketmaster Discovery API."""

from datetime import date

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import Coordinates, ToolResult
from backend.tripply.models.tool_results import EventResult
from backend.tripply.tools.params import SearchEventsParams

TICKETMASTER_URL = "https://app.ticketmaster.com/discovery/v2/events.json"

# Ticketmaster segment ids; "food" has no segment and searches unfiltered
CATEGORY_SEGMENTS: dict[str, str] = {
    "music": "KZFzniwnSyZfZ7v7nJ",
    "sports": "KZFzniwnSyZfZ7v7nE",
    "arts": "KZFzniwnSyZfZ7v7na",
    "family": "KZFzniwnSyZfZ7v7n1",
}


async def search_events(
    params: SearchEventsParams,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[list[EventResult]]:
    """Search upcoming events in a city.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    if not api_key:
        return ToolResult.failure("Ticketmaster API key not configured")

    query: dict[str, str | int] = {
        "apikey": api_key,
        "city": params.location,
        "size": 20,
        "sort": "date,asc",
    }
    if params.dates:
        query["startDateTime"] = f"{params.dates.start.isoformat()}T00:00:00Z"
        query["endDateTime"] = f"{params.dates.end.isoformat()}T23:59:59Z"
    if params.category in CATEGORY_SEGMENTS:
        query["segmentId"] = CATEGORY_SEGMENTS[params.category]

    async with http_client(client) as http:
        response = await http.get(TICKETMASTER_URL, params=query)
        response.raise_for_status()
        data = response.json()

    events = []
    for raw in (data.get("_embedded") or {}).get("events") or []:
        venue = ((raw.get("_embedded") or {}).get("venues") or [{}])[0]
        location = venue.get("location") or {}
        price_ranges = raw.get("priceRanges") or []
        classifications = raw.get("classifications") or []
        images = raw.get("images") or []
        local_date = ((raw.get("dates") or {}).get("start") or {}).get("localDate")

        events.append(
            EventResult(
                id=raw.get("id"),
                name=raw["name"],
                start_date=date.fromisoformat(local_date) if local_date else None,
                venue=venue.get("name") or "Venue TBD",
                address=(venue.get("address") or {}).get("line1"),
                coordinates=(
                    Coordinates(lat=float(location["latitude"]), lng=float(location["longitude"]))
                    if location.get("latitude") and location.get("longitude")
                    else None
                ),
                price=price_ranges[0].get("min") if price_ranges else None,
                category=(
                    (classifications[0].get("segment") or {}).get("name") or "Event"
                    if classifications
                    else "Event"
                ),
                url=raw.get("url"),
                image=images[0].get("url") if images else None,
            )
        )

    return ToolResult.ok(
        events,
        sources=[
            citation_for_http(
                "Ticketmaster Events",
                "https://www.ticketmaster.com",
                snippet=f"Found {len(events)} events in {params.location}",
                confidence=0.9,
            )
        ],
    )
