"""Shared data structures used across fetching, parsing and aggregation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FuelType(str, Enum):
    GASOLINE = "Gasoline"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    UNKNOWN = "Unknown"


class GearType(str, Enum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"
    UNKNOWN = "Unknown"


class Segment(str, Enum):
    ECONOMY = "Economy"
    COMFORT = "Comfort"
    LUXURY = "Luxury"
    PRESTIGE = "Prestige"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Branch:
    """A rentable location as returned by the branch list endpoint."""

    branch_id: str
    location_id: str
    name: str
    city_slug: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "branch_id": self.branch_id,
            "location_id": self.location_id,
            "name": self.name,
            "city_slug": self.city_slug,
        }


@dataclass
class VehicleOffer:
    """One normalised vehicle offer.

    Numeric prices stay ``None`` when the upstream omitted them so that a
    missing price is never mistaken for a free rental. The branch fields are
    empty until the aggregator tags the offer with its originating branch.
    """

    brand_model: str
    fuel: FuelType
    gear: GearType
    segment_name: Segment
    price_now_display: str
    price_office_display: str
    daily_price_display: str
    price_now: Optional[float]
    price_office: Optional[float]
    daily_price: Optional[float]
    currency: str
    image: Optional[str] = None
    branch_id: str = ""
    location_id: str = ""
    branch_name: str = ""
    city_slug: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable version of the offer."""

        return {
            "brand_model": self.brand_model,
            "fuel": self.fuel.value,
            "gear": self.gear.value,
            "segment_name": self.segment_name.value,
            "price_now_display": self.price_now_display,
            "price_office_display": self.price_office_display,
            "daily_price_display": self.daily_price_display,
            "price_now": self.price_now,
            "price_office": self.price_office,
            "daily_price": self.daily_price,
            "currency": self.currency,
            "image": self.image,
            "branch_id": self.branch_id,
            "location_id": self.location_id,
            "branch_name": self.branch_name,
            "city_slug": self.city_slug,
        }
