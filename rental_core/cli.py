"""Command-line interface for city-wide rental searches.

Usage::

    python -m rental_core ankara 2026-11-01 2026-11-04
    python -m rental_core istanbul "2026-11-01 09:00" "2026-11-03 18:00" --segment Economy --json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .aggregator import CityAggregator
from .client import GarentaClient
from .config import (
    ClientSettings,
    InvalidSearchRequest,
    SORT_ORDERS,
    create_criteria_from_form,
    create_listing_query_from_form,
)
from .processor import prepare_listing
from .reporter import build_report

LOGGER = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""

    parser = argparse.ArgumentParser(
        prog="rental-search",
        description="Aggregate rental availability across every branch of a city.",
    )
    parser.add_argument("city", help="City slug, e.g. istanbul (case-insensitive)")
    parser.add_argument("pickup", help="Pickup date, e.g. 2026-11-01 or '01.11.2026 10:00'")
    parser.add_argument("dropoff", help="Dropoff date, after the pickup date")

    filter_group = parser.add_argument_group("Filter Options")
    filter_group.add_argument("--segment", default="all", help="Only show this segment (e.g. Economy)")
    filter_group.add_argument("--fuel", default="all", help="Only show this fuel type (e.g. Diesel)")
    filter_group.add_argument("--gear", default="all", help="Only show this transmission (e.g. Manual)")
    filter_group.add_argument("--sort", default="price_asc", choices=SORT_ORDERS, help="Sort order")

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument("--json", action="store_true", help="Print JSON instead of a text report")
    output_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parallel branch searches (default: RENTAL_MAX_WORKERS or 1)",
    )
    return parser


def main(argv: Optional[List[str]] = None, aggregator: Optional[CityAggregator] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    form = {
        "citySlug": args.city,
        "pickupDate": args.pickup,
        "dropoffDate": args.dropoff,
        "segment": args.segment,
        "fuel": args.fuel,
        "gear": args.gear,
        "sort": args.sort,
    }
    try:
        criteria = create_criteria_from_form(form)
        query = create_listing_query_from_form(form)
    except InvalidSearchRequest as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if aggregator is None:
        settings = ClientSettings.from_env()
        workers = args.workers if args.workers is not None else settings.max_workers
        aggregator = CityAggregator(GarentaClient(settings), max_workers=workers)

    result = aggregator.search_city(criteria.city_slug, criteria.pickup_display, criteria.dropoff_display)
    offers, total = prepare_listing(result.offers, query)
    LOGGER.info("Showing %d of %d aggregated offers", total, len(result.offers))

    if args.json:
        payload = result.to_dict()
        payload["offers"] = [offer.to_dict() for offer in offers]
        payload["total"] = total
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(build_report(result, offers))
    return 0


if __name__ == "__main__":
    sys.exit(main())
