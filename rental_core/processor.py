"""Filtering, sorting and paging of aggregated offers."""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from .config import ListingQuery
from .models import VehicleOffer

UNKNOWN_LABEL = "Unknown"

_FILTER_COLUMNS = {
    "segment": "segment_name",
    "fuel": "fuel",
    "gear": "gear",
}


def offers_to_dataframe(offers: Iterable[VehicleOffer]) -> pd.DataFrame:
    """Convert offers into a :class:`~pandas.DataFrame` indexed by list position."""

    records: List[Dict[str, object]] = []
    for offer in offers:
        records.append(
            {
                "brand_model": offer.brand_model,
                "segment_name": offer.segment_name.value,
                "fuel": offer.fuel.value,
                "gear": offer.gear.value,
                "price_now": offer.price_now if offer.price_now is not None else math.nan,
                "branch_name": offer.branch_name,
            }
        )
    return pd.DataFrame.from_records(
        records, columns=["brand_model", "segment_name", "fuel", "gear", "price_now", "branch_name"]
    )


def filter_offers(df: pd.DataFrame, query: ListingQuery) -> pd.DataFrame:
    """Keep rows matching the segment, fuel and gear selections."""

    if df.empty:
        return df
    for attribute, column in _FILTER_COLUMNS.items():
        selected = getattr(query, attribute)
        if selected and selected != "all":
            df = df[df[column] == selected]
    return df


def sort_offers(df: pd.DataFrame, query: ListingQuery) -> pd.DataFrame:
    """Sort by ``price_now``; missing prices go last and ties keep their order."""

    if df.empty:
        return df
    return df.sort_values(
        "price_now",
        ascending=query.sort != "price_desc",
        kind="mergesort",
        na_position="last",
    )


def paginate(df: pd.DataFrame, query: ListingQuery) -> pd.DataFrame:
    if query.page is None:
        return df
    start = (query.page - 1) * query.per_page
    return df.iloc[start : start + query.per_page]


def prepare_listing(offers: Sequence[VehicleOffer], query: ListingQuery) -> Tuple[List[VehicleOffer], int]:
    """Full listing pipeline returning the requested page and the filtered total."""

    df = offers_to_dataframe(offers)
    df = filter_offers(df, query)
    df = sort_offers(df, query)
    total = len(df)
    df = paginate(df, query)
    return [offers[position] for position in df.index], total


def summarise_offers(offers: Iterable[VehicleOffer]) -> Dict[str, float]:
    """Return simple price statistics across offers that carry a price."""

    prices = [offer.price_now for offer in offers if offer.price_now is not None]
    if not prices:
        return {"count": 0, "average_price": 0.0, "min_price": 0.0, "max_price": 0.0}

    series = pd.Series(prices, dtype="float64")
    return {
        "count": int(series.count()),
        "average_price": float(series.mean()),
        "min_price": float(series.min()),
        "max_price": float(series.max()),
    }


def filter_options(offers: Iterable[VehicleOffer]) -> Dict[str, List[str]]:
    """Distinct known labels per filter, for populating filter menus."""

    df = offers_to_dataframe(offers)
    options: Dict[str, List[str]] = {}
    for attribute, column in _FILTER_COLUMNS.items():
        values = df[column].dropna().unique().tolist() if not df.empty else []
        options[attribute] = sorted(value for value in values if value != UNKNOWN_LABEL)
    return options
