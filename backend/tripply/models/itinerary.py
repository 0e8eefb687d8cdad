"""Itinerary models - structured day-by-day plan emitted in itinerary mode.

Wire names are camelCase to match the JSON block the model is instructed to
emit. Only the shape is required: a `tripSummary` object and a non-empty list
of day objects. Every inner field is optional; a value that is not exactly of
the expected type is kept as raw JSON instead of being coerced or failing
the plan. Unknown keys are kept too, so a parsed plan dumps back to the exact
JSON it was read from (`model_dump(by_alias=True, exclude_unset=True)`).
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, StrictBool, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel

TimeSlot = Literal["morning", "afternoon", "evening", "night"]

# Typed when well-formed, raw JSON otherwise
_LOOSE = Field(union_mode="left_to_right")
Text = Annotated[str | JsonValue, _LOOSE]
Number = Annotated[StrictFloat | JsonValue, _LOOSE]
Whole = Annotated[StrictInt | JsonValue, _LOOSE]
Flag = Annotated[StrictBool | JsonValue, _LOOSE]
TextList = Annotated[list[str] | JsonValue, _LOOSE]
Slot = Annotated[TimeSlot | JsonValue, _LOOSE]


class _ItineraryModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ItineraryCoordinates(_ItineraryModel):
    lat: Number = None
    lng: Number = None


class TripSummary(_ItineraryModel):
    """Summary of the whole plan."""

    destination: Text = None
    days: Whole = None
    traveler_type: Text = None
    pace: Text = None
    focus: TextList = None


class ItineraryItem(_ItineraryModel):
    """One stop in a day: a sight, a meal, a check-in..."""

    type: Text = None
    name: Text = None
    place_id: Text = None
    time_slot: Slot = None
    start_time: Text = None
    duration_minutes: Whole = None
    why: TextList = None
    address: Text = None
    coordinates: Annotated[ItineraryCoordinates | JsonValue, _LOOSE] = None
    notes: Text = None
    is_flexible: Flag = None


class ItineraryDay(_ItineraryModel):
    """A single day of the plan, items in visiting order."""

    day: Whole = None
    date: Text = None
    theme: Text = None
    why_this_day_works: TextList = None
    items: Annotated[list[ItineraryItem] | JsonValue, _LOOSE] = None
    notes: Text = None


class ItineraryResponse(_ItineraryModel):
    """Complete structured plan."""

    trip_summary: TripSummary
    why_this_plan_works: TextList = None
    days: list[ItineraryDay] = Field(..., min_length=1)
    general_tips: TextList = None
