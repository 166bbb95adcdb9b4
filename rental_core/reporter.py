"""Reporting helpers for city searches."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .aggregator import CitySearchResult
from .models import VehicleOffer
from .processor import summarise_offers

TOP_OFFERS = 10


def _format_price(value: Optional[float], currency: str) -> str:
    if value is None:
        return "–"
    return f"{value:,.2f} {currency}"


def generate_offer_table(offers: Iterable[VehicleOffer]) -> str:
    """Return a markdown-style table of offers."""

    headers = ["Vehicle", "Segment", "Fuel", "Gear", "Pay now", "Per day", "Branch"]
    rows: List[str] = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(["---"] * len(headers)) + " |",
    ]

    offer_list = list(offers)
    if not offer_list:
        rows.append("| No offers |" + " |" * (len(headers) - 1))
        return "\n".join(rows)

    for offer in offer_list:
        columns = [
            offer.brand_model,
            offer.segment_name.value,
            offer.fuel.value,
            offer.gear.value,
            _format_price(offer.price_now, offer.currency),
            offer.daily_price_display,
            offer.branch_name or "-",
        ]
        rows.append("| " + " | ".join(columns) + " |")
    return "\n".join(rows)


def build_report(result: CitySearchResult, offers: Optional[Sequence[VehicleOffer]] = None) -> str:
    """Create a text report for a city search.

    ``offers`` overrides ``result.offers`` when the caller already filtered them.
    """

    selected = list(result.offers if offers is None else offers)
    summary = summarise_offers(selected)
    currency = selected[0].currency if selected else "TRY"

    lines: List[str] = [
        "Rental availability report",
        "==========================",
    ]
    if result.warnings:
        lines.append("")
        lines.extend(f"WARNING: {message}" for message in result.warnings)

    lines.extend(
        [
            "",
            f"City: {result.city_slug}",
            f"Period: {result.pickup_date} – {result.dropoff_date}",
            f"Branches searched: {len(result.branches)}",
        ]
    )
    if result.failed_branches:
        names = ", ".join(branch.name for branch in result.failed_branches)
        lines.append(f"Branches without response: {names}")

    lines.append("")
    lines.append("Summary:")
    if summary["count"] == 0:
        lines.append("- No offers found")
    else:
        lines.append(f"- {summary['count']} offers found")
        lines.append(f"- Average price: {_format_price(summary['average_price'], currency)}")
        lines.append(f"- Cheapest offer: {_format_price(summary['min_price'], currency)}")
        lines.append(f"- Most expensive offer: {_format_price(summary['max_price'], currency)}")

    lines.append("")
    lines.append("Top offers:")
    lines.append(generate_offer_table(selected[:TOP_OFFERS]))
    return "\n".join(lines)
