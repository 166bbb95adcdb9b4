"""Flask based JSON backend for the city-wide rental search."""
from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from rental_core import (
    CityAggregator,
    ClientSettings,
    GarentaClient,
    InvalidSearchRequest,
    TransportError,
    create_criteria_from_form,
    create_listing_query_from_form,
)
from rental_core.processor import filter_options, prepare_listing, summarise_offers

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = Flask(__name__)

settings = ClientSettings.from_env()
aggregator = CityAggregator(GarentaClient(settings), max_workers=settings.max_workers)


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/api/vehicles")
def vehicles():
    form_data = request.args.to_dict()
    try:
        criteria = create_criteria_from_form(form_data)
        query = create_listing_query_from_form(form_data)
    except InvalidSearchRequest as exc:
        return jsonify({"success": False, "error": str(exc)}), 400

    result = aggregator.search_city(criteria.city_slug, criteria.pickup_display, criteria.dropoff_display)
    offers, total = prepare_listing(result.offers, query)
    return jsonify(
        {
            "success": True,
            "data": [offer.to_dict() for offer in offers],
            "count": len(offers),
            "total": total,
            "page": query.page,
            "per_page": query.per_page,
            "criteria": criteria.to_dict(),
            "query": query.to_dict(),
            "filters": filter_options(result.offers),
            "summary": summarise_offers(result.offers),
            "warnings": result.warnings,
        }
    )


@app.route("/api/cities")
def cities():
    try:
        city_list = aggregator.list_cities()
    except TransportError as exc:
        LOGGER.error("City list unavailable: %s", exc)
        return jsonify({"success": False, "error": f"Failed to retrieve city list: {exc}"}), 500
    return jsonify({"success": True, "cities": city_list})


if __name__ == "__main__":
    app.run(debug=True)
