"""Typed parameter models for every declared tool.

The model sees these as JSON-schema function declarations; the executor
validates incoming arguments against them before calling an implementation.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class DateRange(BaseModel):
    """Inclusive date range."""

    start: date = Field(..., description="Start date in YYYY-MM-DD format")
    end: date = Field(..., description="End date in YYYY-MM-DD format")

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


class SearchWebParams(BaseModel):
    query: str = Field(..., min_length=1, description="The search query")
    num_results: int = Field(5, ge=1, le=10, description="Number of results to return")


class GetWeatherParams(BaseModel):
    location: str = Field(
        ..., min_length=1, description='City name, e.g. "Paris" or "Lisbon, Portugal"'
    )
    dates: DateRange | None = Field(None, description="Forecast window (optional)")


class SearchPlacesParams(BaseModel):
    query: str = Field(..., min_length=1, description='What to search for, e.g. "hotels in Paris"')
    location: str = Field(..., min_length=1, description="Location to search in")
    type: Literal["hotel", "restaurant", "attraction", "cafe", "bar", "all"] = Field(
        "all", description="Type of place to search for"
    )
    radius: int = Field(5000, ge=100, le=50000, description="Search radius in meters")
    price_level: list[int] | None = Field(
        None, description="Price levels to filter by (1=cheap, 4=expensive)"
    )
    min_rating: float | None = Field(None, ge=1, le=5, description="Minimum rating (1-5)")

    @model_validator(mode="after")
    def _check_price_levels(self) -> "SearchPlacesParams":
        if self.price_level and any(level not in (1, 2, 3, 4) for level in self.price_level):
            raise ValueError("price_level entries must be between 1 and 4")
        return self


class GetPlaceDetailsParams(BaseModel):
    place_id: str = Field(..., min_length=1, description="Google Places ID")


class SearchEventsParams(BaseModel):
    location: str = Field(..., min_length=1, description="City or venue name")
    dates: DateRange | None = Field(None, description="Date window for events")
    category: Literal["all", "music", "sports", "arts", "family", "food"] = Field(
        "all", description="Event category"
    )


class CalculateTravelTimeParams(BaseModel):
    origin: str = Field(..., min_length=1, description="Starting address or coordinates")
    destination: str = Field(..., min_length=1, description="Ending address or coordinates")
    mode: Literal["driving", "walking", "transit", "bicycling"] = Field(
        "walking", description="Transportation mode"
    )
    departure_time: datetime | None = Field(None, description="Departure time in ISO format")


class SearchHotelOffersParams(BaseModel):
    city: str = Field(..., min_length=1, description="City to search hotels in")
    check_in_date: date = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out_date: date = Field(..., description="Check-out date in YYYY-MM-DD format")
    adults: int = Field(2, ge=1, le=9, description="Number of adult guests")
    max_results: int = Field(10, ge=1, le=20, description="Maximum offers to return")
    max_price: float | None = Field(None, gt=0, description="Maximum price per night in USD")

    @model_validator(mode="after")
    def _check_stay(self) -> "SearchHotelOffersParams":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class SearchRedditParams(BaseModel):
    destination: str = Field(..., min_length=1, description="Destination to look up")
    sort: Literal["relevance", "hot", "top", "new"] = Field("relevance", description="Sort order")
    time: Literal["week", "month", "year", "all"] = Field("year", description="Time window")
    limit: int = Field(10, ge=1, le=25, description="Maximum posts to return")


class SearchVideosParams(BaseModel):
    query: str = Field(..., min_length=1, description="What the traveler wants to see")
    location: str = Field(..., min_length=1, description="City or destination name")
    country: str | None = Field(None, description="Country of the destination")
    traveler_type: str | None = Field(None, description="solo, couple, family or friends")
