"""Rental core package exposing the city-wide availability search."""
from .aggregator import CityAggregator, CitySearchResult
from .client import GarentaClient, TransportError, TransportResult
from .config import (
    ClientSettings,
    InvalidSearchRequest,
    ListingQuery,
    SearchCriteria,
    create_criteria_from_form,
    create_listing_query_from_form,
)
from .models import Branch, FuelType, GearType, Segment, VehicleOffer
from .parser import normalize_branches, normalize_vehicles

__all__ = [
    "Branch",
    "CityAggregator",
    "CitySearchResult",
    "ClientSettings",
    "FuelType",
    "GarentaClient",
    "GearType",
    "InvalidSearchRequest",
    "ListingQuery",
    "SearchCriteria",
    "Segment",
    "TransportError",
    "TransportResult",
    "VehicleOffer",
    "create_criteria_from_form",
    "create_listing_query_from_form",
    "normalize_branches",
    "normalize_vehicles",
]
