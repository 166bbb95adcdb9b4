"""City-wide aggregation of per-branch vehicle searches."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .client import TransportResult
from .models import Branch, VehicleOffer
from .parser import normalize_branches, normalize_vehicles

LOGGER = logging.getLogger(__name__)

BRANCHES_PATH = "/GetBranchesData"
SEARCH_PATH = "/Search"


class Transport(Protocol):
    def get(self, path: str) -> TransportResult: ...

    def post(self, path: str, payload: Dict[str, Any]) -> TransportResult: ...


@dataclass
class CitySearchResult:
    """Result returned by :meth:`CityAggregator.search_city`."""

    city_slug: str
    pickup_date: str
    dropoff_date: str
    branches: List[Branch] = field(default_factory=list)
    failed_branches: List[Branch] = field(default_factory=list)
    offers: List[VehicleOffer] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "city_slug": self.city_slug,
            "pickup_date": self.pickup_date,
            "dropoff_date": self.dropoff_date,
            "branches": [branch.to_dict() for branch in self.branches],
            "failed_branches": [branch.to_dict() for branch in self.failed_branches],
            "offers": [offer.to_dict() for offer in self.offers],
            "warnings": list(self.warnings),
        }


def build_search_payload(branch: Branch, pickup_date: str, dropoff_date: str) -> Dict[str, Any]:
    """Search payload for a round-trip rental at a single branch."""

    return {
        "branchId": branch.branch_id,
        "locationId": branch.location_id,
        "arrivalBranchId": branch.branch_id,
        "arrivalLocationId": branch.location_id,
        "month": None,
        "rentId": None,
        "couponCode": None,
        "collaborationId": None,
        "collaborationReferenceId": None,
        "pickupDate": pickup_date,
        "dropoffDate": dropoff_date,
    }


def tag_offers(offers: List[VehicleOffer], branch: Branch) -> List[VehicleOffer]:
    return [
        replace(
            offer,
            branch_id=branch.branch_id,
            location_id=branch.location_id,
            branch_name=branch.name,
            city_slug=branch.city_slug,
        )
        for offer in offers
    ]


def sort_by_price(offers: List[VehicleOffer]) -> List[VehicleOffer]:
    """Drop unpriced offers and sort the rest by ``price_now`` (stable)."""

    priced = [offer for offer in offers if offer.price_now is not None]
    return sorted(priced, key=lambda offer: offer.price_now)


def derive_cities(branches: List[Branch]) -> List[Dict[str, str]]:
    """Distinct cities of a branch list as ``{"slug", "name"}`` sorted by name."""

    seen = set()
    cities: List[Dict[str, str]] = []
    for branch in branches:
        if not branch.city_slug or branch.city_slug.casefold() in seen:
            continue
        seen.add(branch.city_slug.casefold())
        cities.append({"slug": branch.city_slug, "name": branch.city_slug[:1].upper() + branch.city_slug[1:]})
    return sorted(cities, key=lambda city: city["name"])


class CityAggregator:
    """Merge the availability of every branch in a city into one ranked list."""

    def __init__(self, client: Transport, max_workers: int = 1) -> None:
        self.client = client
        self.max_workers = max(1, max_workers)

    def fetch_branches(self, issues: Optional[List[str]] = None) -> Tuple[TransportResult, List[Branch]]:
        result = self.client.get(BRANCHES_PATH)
        if not result.ok:
            LOGGER.error("Failed to fetch branch data: %s", result.error)
            return result, []
        return result, normalize_branches(result.body or "", issues)

    def list_cities(self) -> List[Dict[str, str]]:
        """Return the cities that have at least one branch.

        Raises :class:`~rental_core.client.TransportError` when the branch
        list cannot be fetched.
        """

        result, branches = self.fetch_branches()
        result.raise_for_error()
        return derive_cities(branches)

    def search_branch(
        self,
        branch: Branch,
        pickup_date: str,
        dropoff_date: str,
        issues: Optional[List[str]] = None,
    ) -> Optional[List[VehicleOffer]]:
        """Search one branch; ``None`` signals a transport failure."""

        result = self.client.post(SEARCH_PATH, build_search_payload(branch, pickup_date, dropoff_date))
        if not result.ok:
            LOGGER.warning(
                "Failed to search vehicles for branch %s, location %s: %s",
                branch.branch_id,
                branch.location_id,
                result.error,
            )
            return None
        return normalize_vehicles(result.body or "", issues)

    def _search_all(
        self, branches: List[Branch], pickup_date: str, dropoff_date: str
    ) -> List[Tuple[Branch, Optional[List[VehicleOffer]], List[str]]]:
        def _run(branch: Branch) -> Tuple[Branch, Optional[List[VehicleOffer]], List[str]]:
            issues: List[str] = []
            offers = self.search_branch(branch, pickup_date, dropoff_date, issues)
            return branch, offers, issues

        if self.max_workers == 1 or len(branches) < 2:
            return [_run(branch) for branch in branches]
        # map() yields in submission order, so output matches the sequential path.
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(branches))) as executor:
            return list(executor.map(_run, branches))

    def search_city(self, city_slug: str, pickup_date: str, dropoff_date: str) -> CitySearchResult:
        """Run the full branch discovery, fan-out and ranking pipeline."""

        result = CitySearchResult(city_slug=city_slug, pickup_date=pickup_date, dropoff_date=dropoff_date)

        branch_issues: List[str] = []
        fetch_result, all_branches = self.fetch_branches(branch_issues)
        if not fetch_result.ok:
            result.warnings.append("Branch list could not be fetched from the rental API")
            return result
        if not all_branches:
            LOGGER.error("No branches parsed from data.")
            result.warnings.extend(branch_issues)
            result.warnings.append("Rental API returned no branches")
            return result

        target = city_slug.strip().casefold()
        result.branches = [branch for branch in all_branches if branch.city_slug.casefold() == target]
        if not result.branches:
            LOGGER.info("No branches found for city slug: %s", city_slug)
            result.warnings.append(f"No branches found for city '{city_slug}'")
            return result

        collected: List[VehicleOffer] = []
        for branch, offers, issues in self._search_all(result.branches, pickup_date, dropoff_date):
            if offers is None:
                result.failed_branches.append(branch)
                result.warnings.append(f"Search failed for branch '{branch.name}'")
                continue
            result.warnings.extend(f"{branch.name}: {issue}" for issue in issues)
            collected.extend(tag_offers(offers, branch))

        result.offers = sort_by_price(collected)
        LOGGER.info(
            "City %s: %d offers from %d branches (%d failed)",
            city_slug,
            len(result.offers),
            len(result.branches),
            len(result.failed_branches),
        )
        return result

    def get_available_vehicles_by_city(
        self, city_slug: str, pickup_date: str, dropoff_date: str
    ) -> List[VehicleOffer]:
        """Price-ascending offers from every branch in ``city_slug``.

        Dates use the upstream display format ``DD.MM.YYYY HH:MM``. Upstream
        failures produce an empty or partial list rather than an exception.
        """

        return self.search_city(city_slug, pickup_date, dropoff_date).offers
