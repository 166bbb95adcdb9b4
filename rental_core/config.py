"""Configuration and request parsing helpers for the rental search core."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
import os
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_BASE_URL = "https://apigw.garenta.com.tr/"
DEFAULT_TENANT_ID = "4cdb69b2-f39b-4f2f-8302-b6198501bcc9"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_CITY_SLUG = "istanbul"

# Format expected by the upstream search endpoint.
DISPLAY_DATE_FORMAT = "%d.%m.%Y %H:%M"

_DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%d.%m.%Y %H:%M", "%Y-%m-%d %H:%M:%S"]
_DATE_FORMATS = ["%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y"]
# The search form only picks days; rentals start and end at this hour.
DEFAULT_RENTAL_TIME = time(10, 0)

SORT_ORDERS = ("price_asc", "price_desc")
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


class InvalidSearchRequest(ValueError):
    """Raised when a search request is missing or carries invalid parameters."""


@dataclass
class ClientSettings:
    """Connection settings for the upstream rental API."""

    base_url: str = DEFAULT_BASE_URL
    tenant_id: str = DEFAULT_TENANT_ID
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "tr"
    max_workers: int = 1

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """Build settings from ``RENTAL_*`` environment variables."""

        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("RENTAL_API_BASE_URL") or DEFAULT_BASE_URL,
            tenant_id=env.get("RENTAL_TENANT_ID") or DEFAULT_TENANT_ID,
            connect_timeout=_parse_float(env.get("RENTAL_CONNECT_TIMEOUT")) or 10.0,
            read_timeout=_parse_float(env.get("RENTAL_READ_TIMEOUT")) or 30.0,
            user_agent=env.get("RENTAL_USER_AGENT") or DEFAULT_USER_AGENT,
            accept_language=env.get("RENTAL_ACCEPT_LANGUAGE") or "tr",
            max_workers=max(1, _parse_int(env.get("RENTAL_MAX_WORKERS")) or 1),
        )


@dataclass
class SearchCriteria:
    """A city search over one pickup/dropoff window."""

    city_slug: str
    pickup_date: datetime
    dropoff_date: datetime

    @property
    def pickup_display(self) -> str:
        return format_display_date(self.pickup_date)

    @property
    def dropoff_display(self) -> str:
        return format_display_date(self.dropoff_date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city_slug": self.city_slug,
            "pickup_date": self.pickup_display,
            "dropoff_date": self.dropoff_display,
        }


@dataclass
class ListingQuery:
    """Filter, sort and paging options applied to an aggregated offer list."""

    segment: str = "all"
    fuel: str = "all"
    gear: str = "all"
    sort: str = "price_asc"
    page: Optional[int] = None
    per_page: int = DEFAULT_PER_PAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment": self.segment,
            "fuel": self.fuel,
            "gear": self.gear,
            "sort": self.sort,
            "page": self.page,
            "per_page": self.per_page,
        }


def _parse_float(value: str | None) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value.strip().replace(",", "."))
    except ValueError:
        return None


def _parse_int(value: str | None) -> Optional[int]:
    if value is None or not str(value).strip():
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_datetime(value: str | None) -> Optional[datetime]:
    if not value:
        return None
    cleaned = value.strip()
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    for fmt in _DATE_FORMATS:
        try:
            return datetime.combine(datetime.strptime(cleaned, fmt).date(), DEFAULT_RENTAL_TIME)
        except ValueError:
            continue
    return None


def _clean_filter(value: Any) -> str:
    text = str(value or "").strip()
    return text if text else "all"


def normalise_city_slug(value: Any) -> str:
    slug = str(value or "").strip().lower()
    return slug or DEFAULT_CITY_SLUG


def format_display_date(value: datetime) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT)


def create_criteria_from_form(form_data: Mapping[str, Any]) -> SearchCriteria:
    """Create search criteria from query-string or form data."""

    raw_pickup = form_data.get("pickupDate") or form_data.get("pickup_date")
    raw_dropoff = form_data.get("dropoffDate") or form_data.get("dropoff_date")
    if not raw_pickup or not raw_dropoff:
        raise InvalidSearchRequest("Both pickupDate and dropoffDate parameters are required")

    pickup = _parse_datetime(str(raw_pickup))
    if pickup is None:
        raise InvalidSearchRequest(f"Unrecognised pickupDate: {raw_pickup!r}")
    dropoff = _parse_datetime(str(raw_dropoff))
    if dropoff is None:
        raise InvalidSearchRequest(f"Unrecognised dropoffDate: {raw_dropoff!r}")
    if dropoff <= pickup:
        raise InvalidSearchRequest("dropoffDate must be after pickupDate")

    return SearchCriteria(
        city_slug=normalise_city_slug(form_data.get("citySlug") or form_data.get("city_slug")),
        pickup_date=pickup,
        dropoff_date=dropoff,
    )


def create_listing_query_from_form(form_data: Mapping[str, Any]) -> ListingQuery:
    """Create listing options from query-string or form data."""

    sort = str(form_data.get("sort") or "price_asc").strip().lower()
    if sort not in SORT_ORDERS:
        raise InvalidSearchRequest(f"sort must be one of {', '.join(SORT_ORDERS)}")

    page: Optional[int] = None
    if form_data.get("page") not in (None, ""):
        page = _parse_int(form_data.get("page"))
        if page is None or page < 1:
            raise InvalidSearchRequest("page must be a positive integer")

    per_page = DEFAULT_PER_PAGE
    if form_data.get("per_page") not in (None, ""):
        parsed = _parse_int(form_data.get("per_page"))
        if parsed is None or parsed < 1:
            raise InvalidSearchRequest("per_page must be a positive integer")
        per_page = min(parsed, MAX_PER_PAGE)

    return ListingQuery(
        segment=_clean_filter(form_data.get("segment")),
        fuel=_clean_filter(form_data.get("fuel")),
        gear=_clean_filter(form_data.get("gear")),
        sort=sort,
        page=page,
        per_page=per_page,
    )
