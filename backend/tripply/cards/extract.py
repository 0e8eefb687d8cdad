"""Card extraction from completed tool calls.

Converts provider records (places, hotel offers, events) into PlaceCards for
presentation layers. Cards are not deduplicated across tools.
"""

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from backend.tripply.models.cards import CardType, PlaceCard
from backend.tripply.models.chat import ToolCall
from backend.tripply.models.tool_results import EventResult, HotelOffer, PlaceResult, parse_payload

logger = logging.getLogger(__name__)

MAX_CARDS_PER_SEARCH = 6

CARD_TOOLS = frozenset(
    {"search_places", "get_place_details", "search_hotel_offers", "search_events"}
)

_HOTEL_TYPES = frozenset({"lodging", "hotel"})
_RESTAURANT_TYPES = frozenset({"restaurant", "cafe", "bar", "food", "meal_takeaway"})
_SIGHT_TYPES = frozenset({"tourist_attraction", "museum", "park", "art_gallery"})
_ACTIVITY_TYPES = frozenset({"amusement_park", "aquarium", "zoo", "stadium", "night_club"})
_GENERIC_TYPES = frozenset(
    {"restaurant", "food", "point_of_interest", "establishment", "cafe", "bar"}
)


def synthesize_id(tool: str, call_index: int, record_index: int) -> str:
    """Stable per-turn id for a record the provider did not identify."""
    return f"{tool}-{call_index}-{record_index}"


def determine_card_type(types: Sequence[str], query_type: str | None = None) -> CardType:
    """Resolve the card type from the search's query type and the record's categories.

    Priority: hotel, restaurant, sight (location), activity; default location.
    """
    if query_type == "hotel" or _HOTEL_TYPES.intersection(types):
        return "hotel"
    if query_type in ("restaurant", "cafe", "bar") or _RESTAURANT_TYPES.intersection(types):
        return "restaurant"
    if _SIGHT_TYPES.intersection(types):
        return "location"
    if query_type == "attraction" or _ACTIVITY_TYPES.intersection(types):
        return "activity"
    return "location"


def extract_cuisine_type(types: Sequence[str]) -> str | None:
    """First specific category, title-cased ("japanese_restaurant" -> "Japanese Restaurant")."""
    for t in types:
        if t not in _GENERIC_TYPES:
            return t.replace("_", " ").title()
    return None


def card_from_place(place: PlaceResult, card_id: str, query_type: str | None = None) -> PlaceCard:
    card_type = determine_card_type(place.types, query_type)
    return PlaceCard(
        id=place.place_id or card_id,
        type=card_type,
        name=place.name,
        address=place.address,
        coordinates=place.coordinates,
        photos=list(place.photos),
        rating=place.rating,
        review_count=place.review_count,
        price_level=place.price_level,
        description=place.editorial_summary,
        opening_hours=place.opening_hours,
        cuisine_type=extract_cuisine_type(place.types) if card_type == "restaurant" else None,
        url=place.url,
        place_id=place.place_id,
    )


def card_from_hotel(offer: HotelOffer, card_id: str) -> PlaceCard:
    return PlaceCard(
        id=offer.id or card_id,
        type="hotel",
        name=offer.name,
        address=offer.address,
        coordinates=offer.coordinates,
        photos=list(offer.photos),
        rating=offer.rating,
        review_count=offer.review_count,
        price=offer.price_per_night,
        amenities=list(offer.amenities),
        url=offer.url,
        check_in_date=offer.check_in_date,
        check_out_date=offer.check_out_date,
        price_per_night=offer.price_per_night,
        currency=offer.currency,
    )


def card_from_event(event: EventResult, card_id: str) -> PlaceCard:
    when = f" on {event.start_date.isoformat()}" if event.start_date else ""
    venue = f" at {event.venue}" if event.venue else ""
    return PlaceCard(
        id=event.id or card_id,
        type="activity",
        name=event.name,
        address=event.address,
        coordinates=event.coordinates,
        photos=[event.image] if event.image else [],
        price=event.price,
        description=f"{event.category}{venue}{when}",
        url=event.url,
    )


def _cards_for_call(call: ToolCall, call_index: int) -> list[PlaceCard]:
    payload = parse_payload(call.tool, call.result.data)

    if call.tool == "search_places":
        query_type = call.parameters.get("type")
        return [
            card_from_place(place, synthesize_id(call.tool, call_index, i), query_type)
            for i, place in enumerate(payload[:MAX_CARDS_PER_SEARCH])
        ]
    if call.tool == "get_place_details":
        return [card_from_place(payload, synthesize_id(call.tool, call_index, 0), "location")]
    if call.tool == "search_hotel_offers":
        return [
            card_from_hotel(offer, synthesize_id(call.tool, call_index, i))
            for i, offer in enumerate(payload)
        ]
    if call.tool == "search_events":
        return [
            card_from_event(event, synthesize_id(call.tool, call_index, i))
            for i, event in enumerate(payload)
        ]
    return []


def extract_cards(tool_calls: Sequence[ToolCall]) -> list[PlaceCard]:
    """Build cards from every successful place/hotel/event tool call.

    Args:
        tool_calls: Completed tool calls of one turn, in request order

    Returns:
        Cards in tool-call order, then record order
    """
    cards: list[PlaceCard] = []
    for call_index, call in enumerate(tool_calls):
        if call.tool not in CARD_TOOLS or not call.result.success:
            continue
        try:
            cards.extend(_cards_for_call(call, call_index))
        except ValidationError as e:
            logger.warning("Skipping malformed %s result: %s", call.tool, e)
    return cards
