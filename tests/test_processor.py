from typing import Optional
import unittest

from rental_core.aggregator import CitySearchResult
from rental_core.config import ListingQuery
from rental_core.models import Branch, FuelType, GearType, Segment, VehicleOffer
from rental_core.processor import filter_options, prepare_listing, summarise_offers
from rental_core.reporter import build_report, generate_offer_table


def _offer(
    name: str,
    price: Optional[float],
    segment: Segment = Segment.ECONOMY,
    fuel: FuelType = FuelType.GASOLINE,
    gear: GearType = GearType.MANUAL,
) -> VehicleOffer:
    return VehicleOffer(
        brand_model=name,
        fuel=fuel,
        gear=gear,
        segment_name=segment,
        price_now_display=f"{price} TL" if price is not None else "N/A",
        price_office_display="N/A",
        daily_price_display="N/A",
        price_now=price,
        price_office=None,
        daily_price=None,
        currency="TRY",
        branch_name="Kadikoy",
        city_slug="istanbul",
    )


OFFERS = [
    _offer("Clio", 400.0),
    _offer("Egea", 300.0, fuel=FuelType.DIESEL),
    _offer("Passat", 900.0, segment=Segment.COMFORT, fuel=FuelType.DIESEL, gear=GearType.AUTOMATIC),
    _offer("Corolla", 300.0, fuel=FuelType.HYBRID, gear=GearType.AUTOMATIC),
    _offer("Mystery", 500.0, segment=Segment.UNKNOWN, fuel=FuelType.UNKNOWN),
]


class PrepareListingTests(unittest.TestCase):
    def test_default_query_sorts_ascending_and_keeps_ties_in_order(self) -> None:
        offers, total = prepare_listing(OFFERS, ListingQuery())

        self.assertEqual(total, 5)
        self.assertEqual([offer.brand_model for offer in offers], ["Egea", "Corolla", "Clio", "Mystery", "Passat"])

    def test_descending_sort(self) -> None:
        offers, _ = prepare_listing(OFFERS, ListingQuery(sort="price_desc"))

        self.assertEqual(offers[0].brand_model, "Passat")
        self.assertEqual(offers[-1].price_now, 300.0)

    def test_filters_combine(self) -> None:
        offers, total = prepare_listing(OFFERS, ListingQuery(fuel="Diesel", gear="Manual"))

        self.assertEqual(total, 1)
        self.assertEqual(offers[0].brand_model, "Egea")

    def test_pagination_reports_filtered_total(self) -> None:
        offers, total = prepare_listing(OFFERS, ListingQuery(page=2, per_page=2))

        self.assertEqual(total, 5)
        self.assertEqual([offer.brand_model for offer in offers], ["Clio", "Mystery"])

    def test_page_past_the_end_is_empty(self) -> None:
        offers, total = prepare_listing(OFFERS, ListingQuery(page=9, per_page=2))

        self.assertEqual(offers, [])
        self.assertEqual(total, 5)

    def test_empty_input(self) -> None:
        self.assertEqual(prepare_listing([], ListingQuery(segment="Economy")), ([], 0))

    def test_unpriced_offers_sort_last(self) -> None:
        offers, _ = prepare_listing([_offer("NoPrice", None), _offer("Priced", 10.0)], ListingQuery(sort="price_desc"))

        self.assertEqual([offer.brand_model for offer in offers], ["Priced", "NoPrice"])


class SummaryTests(unittest.TestCase):
    def test_summary_ignores_missing_prices(self) -> None:
        summary = summarise_offers(OFFERS + [_offer("NoPrice", None)])

        self.assertEqual(summary["count"], 5)
        self.assertAlmostEqual(summary["average_price"], 480.0)
        self.assertAlmostEqual(summary["min_price"], 300.0)
        self.assertAlmostEqual(summary["max_price"], 900.0)

    def test_summary_of_nothing(self) -> None:
        self.assertEqual(summarise_offers([])["count"], 0)

    def test_filter_options_skip_unknown(self) -> None:
        options = filter_options(OFFERS)

        self.assertEqual(options["segment"], ["Comfort", "Economy"])
        self.assertEqual(options["fuel"], ["Diesel", "Gasoline", "Hybrid"])
        self.assertEqual(options["gear"], ["Automatic", "Manual"])

    def test_filter_options_of_nothing(self) -> None:
        self.assertEqual(filter_options([]), {"segment": [], "fuel": [], "gear": []})


class ReportTests(unittest.TestCase):
    def test_report_lists_summary_and_failed_branches(self) -> None:
        result = CitySearchResult(
            city_slug="istanbul",
            pickup_date="01.11.2026 10:00",
            dropoff_date="03.11.2026 10:00",
            branches=[Branch("br-1", "loc-1", "Kadikoy", "istanbul"), Branch("br-2", "loc-2", "Airport", "istanbul")],
            failed_branches=[Branch("br-2", "loc-2", "Airport", "istanbul")],
            offers=OFFERS[:2],
            warnings=["Search failed for branch 'Airport'"],
        )

        report = build_report(result)

        self.assertIn("WARNING: Search failed for branch 'Airport'", report)
        self.assertIn("Branches searched: 2", report)
        self.assertIn("Branches without response: Airport", report)
        self.assertIn("- 2 offers found", report)
        self.assertIn("- Cheapest offer: 300.00 TRY", report)
        self.assertIn("| Clio | Economy | Gasoline | Manual | 400.00 TRY | N/A | Kadikoy |", report)

    def test_report_without_offers(self) -> None:
        result = CitySearchResult(city_slug="trabzon", pickup_date="a", dropoff_date="b")

        report = build_report(result)

        self.assertIn("- No offers found", report)
        self.assertIn("| No offers |", report)

    def test_table_uses_placeholder_for_missing_price(self) -> None:
        table = generate_offer_table([_offer("NoPrice", None)])

        self.assertIn("| NoPrice | Economy | Gasoline | Manual | – |", table)


if __name__ == "__main__":
    unittest.main()
