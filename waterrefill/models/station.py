"""Refill station domain entities."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


class LocationType(str, Enum):
    """Kinds of places where a bottle can be refilled."""

    WATER_FOUNTAIN = "Water Fountain"
    CAFE = "Café"
    RESTAURANT = "Restaurant"
    SHOP = "Shop"
    PUB = "Pub"
    PUBLIC_SPACE = "Public Space"
    OTHER = "Other"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "LocationType":
        """Resolve a stored value, falling back to OTHER for unknown strings."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @property
    def icon(self) -> str:
        return _LOCATION_ICONS[self]


_LOCATION_ICONS = {
    LocationType.WATER_FOUNTAIN: "drop.fill",
    LocationType.CAFE: "cup.and.saucer.fill",
    LocationType.RESTAURANT: "fork.knife",
    LocationType.SHOP: "bag.fill",
    LocationType.PUB: "wineglass.fill",
    LocationType.PUBLIC_SPACE: "building.columns.fill",
    LocationType.OTHER: "questionmark.circle.fill",
}


class RefillCost(str, Enum):
    """What it costs to refill at a station."""

    FREE = "Free"
    PURCHASE_REQUIRED = "With Purchase"
    PAID = "Paid"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "RefillCost":
        """Resolve a stored value, falling back to FREE for unknown strings."""
        try:
            return cls(value)
        except ValueError:
            return cls.FREE

    @property
    def marker_color(self) -> str:
        return _COST_COLORS[self]


_COST_COLORS = {
    RefillCost.FREE: "green",
    RefillCost.PURCHASE_REQUIRED: "orange",
    RefillCost.PAID: "blue",
}


class ListingType(str, Enum):
    """Who registered the station: a community member or the business itself."""

    USER = "user"
    BUSINESS = "business"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "ListingType":
        # Documents written before listings existed carry no value.
        try:
            return cls(value)
        except ValueError:
            return cls.USER


def new_station_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Station:
    """A place where a user can refill a water bottle."""

    name: str
    description: str = ""
    limitations: str = ""
    coordinate: Optional[Coordinate] = None
    location_type: LocationType = LocationType.OTHER
    cost: RefillCost = RefillCost.FREE
    listing_type: ListingType = ListingType.USER
    photo_references: List[str] = field(default_factory=list)
    date_added: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    added_by_user_id: str = ""
    average_rating: Optional[float] = None
    ratings_count: int = 0
    is_car_accessible: Optional[bool] = None
    is_draft: bool = False
    manual_address: Optional[str] = None
    manual_description: Optional[str] = None
    verified: bool = False
    id: str = field(default_factory=new_station_id)

    @property
    def has_ratings(self) -> bool:
        return self.ratings_count > 0

    def as_submitted(self, added_by_user_id: str) -> "Station":
        """Return a non-draft copy attributed to the given contributor."""
        return replace(self, is_draft=False, added_by_user_id=added_by_user_id)
