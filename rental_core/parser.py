"""Normalisation of raw upstream JSON into :mod:`rental_core.models` objects."""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

from .models import Branch, FuelType, GearType, Segment, VehicleOffer

LOGGER = logging.getLogger(__name__)

RawPayload = Union[str, bytes, Mapping[str, Any]]

CURRENCY = "TRY"
NOT_AVAILABLE = "N/A"

FUEL_TYPES: Dict[int, FuelType] = {
    1: FuelType.GASOLINE,
    2: FuelType.DIESEL,
    3: FuelType.ELECTRIC,
    4: FuelType.HYBRID,
}

TRANSMISSION_TYPES: Dict[int, GearType] = {
    1: GearType.AUTOMATIC,
    2: GearType.AUTOMATIC,
    3: GearType.MANUAL,
}

SEGMENTS: Dict[int, Segment] = {
    1: Segment.ECONOMY,
    2: Segment.COMFORT,
    3: Segment.LUXURY,
    4: Segment.PRESTIGE,
}

_REQUIRED_BRANCH_KEYS = ("citySlug", "id", "referenceId", "name")
_LOG_PREVIEW_CHARS = 500

_Label = TypeVar("_Label")


def _decode(raw: RawPayload) -> Optional[Any]:
    if isinstance(raw, Mapping):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def _preview(raw: RawPayload) -> str:
    if isinstance(raw, Mapping):
        text = json.dumps(raw, default=str)
    elif isinstance(raw, bytes):
        text = raw.decode("utf-8", errors="replace")
    else:
        text = str(raw)
    return text[:_LOG_PREVIEW_CHARS]


def _record_issue(issues: Optional[List[str]], message: str) -> None:
    if issues is not None:
        issues.append(message)


def _coerce_code(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coerce_price(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        price = float(value)
    except (ValueError, OverflowError):
        return None
    # NaN and infinities would break price ordering and JSON output.
    return price if math.isfinite(price) else None


def _lookup(table: Mapping[int, _Label], code: Any, fallback: _Label) -> _Label:
    key = _coerce_code(code)
    if key is None:
        return fallback
    return table.get(key, fallback)


def _image(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _display(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


def normalize_branches(raw: RawPayload, issues: Optional[List[str]] = None) -> List[Branch]:
    """Parse the branch list envelope ``{"data": [...]}``.

    Elements missing any of ``citySlug``, ``id``, ``referenceId`` or ``name``
    are skipped; the remaining branches keep their upstream order. An
    undecodable body or a missing ``data`` list yields an empty list.
    """

    data = _decode(raw)
    items = data.get("data") if isinstance(data, Mapping) else None
    if not isinstance(items, list):
        LOGGER.warning("Failed to parse branches or no data found in JSON: %s", _preview(raw))
        _record_issue(issues, "Branch list response had no data array")
        return []

    branches: List[Branch] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping) or any(item.get(key) is None for key in _REQUIRED_BRANCH_KEYS):
            LOGGER.debug("Skipping incomplete branch record at index %d", index)
            continue
        branches.append(
            Branch(
                branch_id=str(item["referenceId"]),
                location_id=str(item["id"]),
                name=str(item["name"]),
                city_slug=str(item["citySlug"]),
            )
        )
    return branches


def normalize_vehicle(vehicle_info: Mapping[str, Any], price_info: Mapping[str, Any]) -> VehicleOffer:
    """Build a :class:`VehicleOffer` from one vehicle's info and price blocks."""

    return VehicleOffer(
        brand_model=_display(vehicle_info.get("vehicleDescription")),
        fuel=_lookup(FUEL_TYPES, vehicle_info.get("fuelType"), FuelType.UNKNOWN),
        gear=_lookup(TRANSMISSION_TYPES, vehicle_info.get("transmissionType"), GearType.UNKNOWN),
        segment_name=_lookup(SEGMENTS, vehicle_info.get("segment"), Segment.UNKNOWN),
        price_now_display=_display(price_info.get("discountedPriceStr")),
        price_office_display=_display(price_info.get("netPriceStr")),
        daily_price_display=_display(price_info.get("dailyPriceStr")),
        price_now=_coerce_price(price_info.get("discountedPrice")),
        price_office=_coerce_price(price_info.get("netPrice")),
        daily_price=_coerce_price(price_info.get("dailyPrice")),
        currency=CURRENCY,
        image=_image(vehicle_info.get("image")),
    )


def normalize_vehicles(raw: RawPayload, issues: Optional[List[str]] = None) -> List[VehicleOffer]:
    """Parse the search envelope ``{"data": {"vehicles": [...]}}``.

    Application-level failures (``success: false``) and unexpected shapes are
    logged and produce an empty list; this function never raises on bad input.
    """

    data = _decode(raw)
    payload = data.get("data") if isinstance(data, Mapping) else None
    vehicles = payload.get("vehicles") if isinstance(payload, Mapping) else None

    if not isinstance(vehicles, list):
        error = data.get("error") if isinstance(data, Mapping) else None
        if isinstance(data, Mapping) and data.get("success") is False and isinstance(error, Mapping) and error.get("message"):
            LOGGER.warning("Upstream API error during vehicle search: %s", error["message"])
            _record_issue(issues, f"Upstream error: {error['message']}")
        else:
            LOGGER.warning(
                "Failed to parse vehicles or no vehicles found in data.vehicles structure. JSON: %s",
                _preview(raw),
            )
            _record_issue(issues, "Search response had an unexpected structure")
        return []

    offers: List[VehicleOffer] = []
    for index, vehicle in enumerate(vehicles):
        if not isinstance(vehicle, Mapping):
            LOGGER.debug("Skipping non-object vehicle record at index %d", index)
            continue
        vehicle_info = vehicle.get("vehicleInfo")
        price_info = vehicle.get("priceInfo")
        if not isinstance(vehicle_info, Mapping) or not isinstance(price_info, Mapping):
            LOGGER.debug("Skipping vehicle record without vehicleInfo/priceInfo at index %d", index)
            continue
        offers.append(normalize_vehicle(vehicle_info, price_info))
    return offers
