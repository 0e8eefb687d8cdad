"""Place card model - normalized point of interest for presentation layers."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from backend.tripply.models.common import Coordinates

CardType = Literal["location", "restaurant", "hotel", "activity"]


class PlaceCard(BaseModel):
    """Normalized recommendable place.

    `type` decides which optional fields a consumer should look at:
    restaurants carry `cuisine_type`, hotels carry `amenities`/`price_range`
    and stay dates, activities carry `price`/`duration`.
    """

    id: str
    type: CardType = "location"
    name: str
    address: str | None = None
    coordinates: Coordinates | None = None
    photos: list[str] = Field(default_factory=list)
    rating: float | None = None
    review_count: int | None = None
    price: float | None = None
    price_level: int | None = Field(None, ge=0, le=4)
    price_range: tuple[float, float] | None = None
    description: str | None = None
    opening_hours: str | None = None
    cuisine_type: str | None = None
    amenities: list[str] | None = None
    duration: str | None = None
    url: str | None = None
    place_id: str | None = None

    # Hotel stay details
    check_in_date: date | None = None
    check_out_date: date | None = None
    price_per_night: float | None = None
    currency: str | None = None
