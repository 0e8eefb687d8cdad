"""Tests for place card extraction from tool calls."""

from datetime import date
from typing import Any

import pytest

from backend.tripply.cards.extract import (
    MAX_CARDS_PER_SEARCH,
    determine_card_type,
    extract_cards,
    extract_cuisine_type,
    synthesize_id,
)
from backend.tripply.models.chat import ToolCall
from backend.tripply.models.common import ToolResult


def make_call(tool: str, data: Any, parameters: dict[str, Any] | None = None) -> ToolCall:
    return ToolCall(
        id=f"call-{tool}",
        tool=tool,
        parameters=parameters or {},
        result=ToolResult.ok(data),
    )


def place(i: int, types: list[str], place_id: str | None = "auto") -> dict[str, Any]:
    return {
        "place_id": f"place-{i}" if place_id == "auto" else place_id,
        "name": f"Place {i}",
        "types": types,
        "rating": 4.2,
        "photos": [f"https://photos.example/{i}.jpg"],
    }


class TestDetermineCardType:
    @pytest.mark.parametrize(
        ("types", "query_type", "expected"),
        [
            (["lodging"], None, "hotel"),
            (["museum"], "hotel", "hotel"),
            (["restaurant", "lodging"], None, "hotel"),
            (["cafe"], None, "restaurant"),
            (["point_of_interest"], "bar", "restaurant"),
            (["museum", "point_of_interest"], None, "location"),
            (["zoo"], None, "activity"),
            (["point_of_interest"], "attraction", "activity"),
            (["park"], "attraction", "location"),
            (["point_of_interest"], None, "location"),
            ([], None, "location"),
        ],
    )
    def test_priority(self, types: list[str], query_type: str | None, expected: str) -> None:
        assert determine_card_type(types, query_type) == expected


def test_extract_cuisine_type_skips_generic_categories() -> None:
    assert extract_cuisine_type(["restaurant", "japanese_restaurant"]) == "Japanese Restaurant"
    assert extract_cuisine_type(["restaurant", "food"]) is None


def test_search_places_caps_cards_per_search() -> None:
    call = make_call(
        "search_places",
        [place(i, ["restaurant", "seafood_restaurant"]) for i in range(10)],
        {"type": "restaurant"},
    )

    cards = extract_cards([call])

    assert len(cards) == MAX_CARDS_PER_SEARCH
    assert [c.id for c in cards] == [f"place-{i}" for i in range(MAX_CARDS_PER_SEARCH)]
    assert all(c.type == "restaurant" for c in cards)
    assert cards[0].cuisine_type == "Seafood Restaurant"


def test_missing_ids_are_synthesized_and_unique() -> None:
    call = make_call("search_places", [place(i, ["museum"], place_id=None) for i in range(3)])

    cards = extract_cards([call])

    assert [c.id for c in cards] == [synthesize_id("search_places", 0, i) for i in range(3)]
    assert len({c.id for c in cards}) == 3


def test_place_details_card_is_a_location_unless_typed() -> None:
    cards = extract_cards([make_call("get_place_details", place(1, ["museum"]))])

    assert len(cards) == 1
    assert cards[0].type == "location"
    assert cards[0].place_id == "place-1"


def test_hotel_offer_cards_carry_stay_details() -> None:
    offer = {
        "id": "hotel-1",
        "name": "Hotel Avenida",
        "price_per_night": 140.0,
        "currency": "EUR",
        "amenities": ["Wi-Fi", "Pool"],
        "check_in_date": "2025-06-10",
        "check_out_date": "2025-06-12",
    }

    [card] = extract_cards([make_call("search_hotel_offers", [offer])])

    assert card.type == "hotel"
    assert card.price_per_night == 140.0
    assert card.currency == "EUR"
    assert card.amenities == ["Wi-Fi", "Pool"]
    assert card.check_in_date == date(2025, 6, 10)


def test_event_cards_are_activities() -> None:
    event = {
        "id": "evt-1",
        "name": "Fado Night",
        "start_date": "2025-06-11",
        "venue": "Clube de Fado",
        "category": "Music",
    }

    [card] = extract_cards([make_call("search_events", [event])])

    assert card.type == "activity"
    assert card.description == "Music at Clube de Fado on 2025-06-11"


def test_failed_and_non_card_tools_are_skipped() -> None:
    failed = ToolCall(
        id="c1", tool="search_places", parameters={}, result=ToolResult.failure("quota")
    )
    weather = make_call("search_web", [{"title": "Guide", "url": "https://example.com"}])

    assert extract_cards([failed, weather]) == []


def test_malformed_payload_is_skipped_not_raised() -> None:
    bad = make_call("search_places", [{"place_id": "x"}])  # no name
    good = make_call("search_places", [place(1, ["museum"])])

    cards = extract_cards([bad, good])

    assert [c.id for c in cards] == ["place-1"]


def test_cards_follow_call_order() -> None:
    hotels = make_call("search_hotel_offers", [{"id": "h1", "name": "Hotel"}])
    places = make_call("search_places", [place(1, ["museum"])])

    assert [c.id for c in extract_cards([hotels, places])] == ["h1", "place-1"]
