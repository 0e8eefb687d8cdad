"""Tests for itinerary extraction from model output."""

import json

from backend.tripply.itinerary.parser import find_json_block, parse_itinerary

PLAN = {
    "tripSummary": {"destination": "Lisbon", "days": 2, "travelerType": "couple", "pace": "relaxed"},
    "whyThisPlanWorks": ["Walkable neighborhoods grouped by day"],
    "days": [
        {
            "day": 1,
            "theme": "Alfama",
            "items": [
                {"type": "activity", "name": "Castelo de Sao Jorge", "timeSlot": "morning", "durationMinutes": 120},
                {"type": "restaurant", "name": "Taberna", "timeSlot": "evening", "durationMinutes": 90},
            ],
        },
        {"day": 2, "theme": "Belem", "items": [{"name": "Jeronimos Monastery", "customTag": "unesco"}]},
    ],
    "generalTips": ["Wear comfortable shoes"],
}


def wrap(body: str) -> str:
    return f"Here is your plan.\n\n```json\n{body}\n```\n\nEnjoy!"


def test_parses_valid_block() -> None:
    itinerary = parse_itinerary(wrap(json.dumps(PLAN)))

    assert itinerary is not None
    assert itinerary.trip_summary.destination == "Lisbon"
    assert len(itinerary.days) == 2
    assert itinerary.days[0].items[0].time_slot == "morning"
    assert itinerary.days[0].items[1].duration_minutes == 90


def test_dump_round_trips_original_json() -> None:
    itinerary = parse_itinerary(wrap(json.dumps(PLAN)))

    assert itinerary is not None
    assert itinerary.model_dump(by_alias=True, exclude_unset=True) == PLAN


def test_no_block_returns_none() -> None:
    assert parse_itinerary("Day 1: see the castle. Day 2: eat pastries.") is None


def test_malformed_json_returns_none() -> None:
    assert parse_itinerary(wrap('{"tripSummary": {"destination": "Lisbon"}, "days": [')) is None


def test_non_object_json_returns_none() -> None:
    assert parse_itinerary(wrap("[1, 2, 3]")) is None


def test_missing_required_fields_returns_none() -> None:
    assert parse_itinerary(wrap(json.dumps({"tripSummary": {"destination": "Lisbon"}}))) is None
    assert parse_itinerary(wrap(json.dumps({"days": PLAN["days"]}))) is None


def test_empty_days_returns_none() -> None:
    plan = {**PLAN, "days": []}
    assert parse_itinerary(wrap(json.dumps(plan))) is None


def test_only_first_block_is_used() -> None:
    text = wrap("not json") + "\n```json\n" + json.dumps(PLAN) + "\n```"

    assert find_json_block(text) == "not json"
    assert parse_itinerary(text) is None


def test_fence_tag_is_case_insensitive() -> None:
    text = "```JSON\n" + json.dumps(PLAN) + "\n```"

    assert parse_itinerary(text) is not None


def test_summary_without_destination_is_accepted() -> None:
    plan = {
        "tripSummary": {"title": "Lisbon weekend", "days": 2},
        "days": [{"day": 1, "items": [{"name": "Time Out Market"}]}],
    }

    itinerary = parse_itinerary(wrap(json.dumps(plan)))

    assert itinerary is not None
    assert itinerary.trip_summary.destination is None
    assert itinerary.model_dump(by_alias=True, exclude_unset=True) == plan


def test_days_only_need_to_be_objects() -> None:
    plan = {"tripSummary": {}, "days": [{}, {"theme": "Sintra", "items": []}]}

    itinerary = parse_itinerary(wrap(json.dumps(plan)))

    assert itinerary is not None
    assert itinerary.days[0].day is None
    assert itinerary.model_dump(by_alias=True, exclude_unset=True) == plan


def test_unexpected_value_types_are_kept_verbatim() -> None:
    plan = {
        "tripSummary": {"destination": "Lisbon", "days": "2", "focus": "food"},
        "days": [
            {
                "day": "one",
                "items": [
                    {
                        "timeSlot": "late evening",
                        "durationMinutes": 90.5,
                        "isFlexible": "yes",
                        "coordinates": {"lat": 38.71, "lng": -9.14, "precision": "street"},
                    },
                    {"name": "Miradouro", "coordinates": "38.71,-9.14"},
                ],
            }
        ],
    }

    itinerary = parse_itinerary(wrap(json.dumps(plan)))

    assert itinerary is not None
    assert itinerary.trip_summary.days == "2"
    item = itinerary.days[0].items[0]
    assert item.time_slot == "late evening"
    assert item.duration_minutes == 90.5
    assert item.is_flexible == "yes"
    assert itinerary.model_dump(by_alias=True, exclude_unset=True) == plan


def test_non_object_summary_or_day_returns_none() -> None:
    assert parse_itinerary(wrap(json.dumps({"tripSummary": "Lisbon", "days": [{}]}))) is None
    assert parse_itinerary(wrap(json.dumps({"tripSummary": {}, "days": ["Day 1"]}))) is None
    assert parse_itinerary(wrap(json.dumps({"tripSummary": {}, "days": {"1": {}}}))) is None
