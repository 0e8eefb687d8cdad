"""Hotel offers adapter using SerpApi Google Hotels.

Docs: https://serpapi.com/google-hotels-api
"""

import logging
from typing import Any

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import Coordinates, ToolResult
from backend.tripply.models.tool_results import HotelOffer
from backend.tripply.tools.params import SearchHotelOffersParams

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search.json"


def _image_url(image: Any) -> str | None:
    # SerpApi returns either bare URLs or {thumbnail, original_image} objects
    if isinstance(image, str):
        return image
    if isinstance(image, dict):
        return image.get("original_image") or image.get("thumbnail")
    return None


def _offer_from_serpapi(raw: dict[str, Any], params: SearchHotelOffersParams) -> HotelOffer:
    gps = raw.get("gps_coordinates") or {}
    photos = [url for url in map(_image_url, raw.get("images") or []) if url]
    if not photos and raw.get("thumbnail"):
        photos = [raw["thumbnail"]]

    return HotelOffer(
        id=raw.get("property_token"),
        name=raw["name"],
        address=raw.get("address") or raw.get("description"),
        coordinates=(
            Coordinates(lat=gps["latitude"], lng=gps["longitude"])
            if "latitude" in gps and "longitude" in gps
            else None
        ),
        rating=raw.get("overall_rating") or raw.get("rating"),
        review_count=raw.get("reviews"),
        price_per_night=(raw.get("rate_per_night") or {}).get("extracted_lowest"),
        total_price=(raw.get("total_rate") or {}).get("extracted_lowest"),
        currency="USD",
        amenities=raw.get("amenities") or [],
        photos=photos[:5],
        check_in_date=params.check_in_date,
        check_out_date=params.check_out_date,
        url=raw.get("link"),
    )


async def search_hotel_offers(
    params: SearchHotelOffersParams,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[list[HotelOffer]]:
    """Search bookable hotel offers for a stay.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    if not api_key:
        return ToolResult.failure("SerpApi key not configured")

    query = {
        "engine": "google_hotels",
        "q": f"hotels in {params.city}",
        "check_in_date": params.check_in_date.isoformat(),
        "check_out_date": params.check_out_date.isoformat(),
        "adults": params.adults,
        "currency": "USD",
        "gl": "us",
        "hl": "en",
        "api_key": api_key,
    }
    if params.max_price:
        query["max_price"] = int(params.max_price)

    async with http_client(client) as http:
        response = await http.get(SERPAPI_URL, params=query)
        response.raise_for_status()
        data = response.json()

    if data.get("error"):
        return ToolResult.failure(f"SerpApi error: {data['error']}")

    properties = data.get("properties") or []
    offers = [_offer_from_serpapi(raw, params) for raw in properties if raw.get("name")]
    if params.max_price:
        offers = [
            o for o in offers if o.price_per_night is None or o.price_per_night <= params.max_price
        ]
    offers = offers[: params.max_results]

    logger.debug("SerpApi returned %d hotel offers for %s", len(offers), params.city)
    return ToolResult.ok(
        offers,
        sources=[
            citation_for_http(
                "Google Hotels",
                "https://www.google.com/travel/hotels",
                snippet=f"Found {len(offers)} hotel offers in {params.city}",
                confidence=0.9,
            )
        ],
    )
