import asyncio
from typing import Dict, List, Optional

import pytest

from app import orchestrator
from app.errors import InvalidBudget, InvalidCoordinate, InvalidStartDate, UnsupportedLanguage
from app.reference import load_reference_data
from app.schemas import RouteInfo
from app.tools.results import ProviderResult

REFERENCE = load_reference_data()


def _place(place_id: str, lat: float, lng: float, rating: float, price_level: Optional[int] = None) -> dict:
    place = {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "rating": rating,
        "geometry": {"location": {"lat": lat, "lng": lng}},
        "vicinity": "Goa",
    }
    if price_level is not None:
        place["price_level"] = price_level
    return place


class FakePlaces:
    def __init__(self, results: Optional[Dict[str, List[dict]]] = None, delays: Optional[Dict[str, float]] = None):
        self.results = results or {}
        self.delays = delays or {}
        self.calls: List[tuple] = []

    async def search(self, lat, lon, radius_meters, category, *, cuisine=None):
        self.calls.append((category, radius_meters, cuisine))
        await asyncio.sleep(self.delays.get(category, 0))
        return ProviderResult(source=f"places:{category}", items=list(self.results.get(category, [])))


class FailingPlaces(FakePlaces):
    async def search(self, lat, lon, radius_meters, category, *, cuisine=None):
        self.calls.append((category, radius_meters, cuisine))
        return ProviderResult.failed(f"places:{category}", "status REQUEST_DENIED")


class RaisingPlaces(FakePlaces):
    async def search(self, lat, lon, radius_meters, category, *, cuisine=None):
        raise RuntimeError("socket closed")


GOA_RESULTS = {
    "hotel": [
        _place("g-hotel-1", 15.50, 73.82, 4.6),
        _place("g-hotel-2", 15.52, 73.80, 4.1),
        {"place_id": "broken", "name": "No geometry"},
    ],
    "restaurant": [
        _place("g-rest-1", 15.49, 73.83, 4.7),
        _place("g-rest-2", 15.50, 73.84, 4.4),
    ],
}


def _generate(budget=10000, days=5, destination="Goa", start="2025-11-01", language="English", places=None):
    return asyncio.run(
        orchestrator.generate_itinerary(
            budget,
            days,
            destination,
            start,
            language,
            reference=REFERENCE,
            places=places if places is not None else FakePlaces(GOA_RESULTS),
        )
    )


def _all_ids_per_day(itinerary) -> List[set]:
    per_day = []
    for day in itinerary.day_plans:
        ids = {c.id for slot in day.slots() for c in slot.assigned}
        ids.add(day.accommodation.id)
        ids.update(leg.id for leg in day.transport)
        per_day.append(ids)
    return per_day


def test_generate_itinerary_builds_every_day():
    itinerary = _generate()

    assert len(itinerary.day_plans) == 5
    assert [d.day_index for d in itinerary.day_plans] == [1, 2, 3, 4, 5]
    assert itinerary.total_estimated_cost == pytest.approx(sum(d.total_cost for d in itinerary.day_plans))
    assert itinerary.budget_breakdown.total() <= 10000
    assert itinerary.diagnostics.dropped_count == 1
    assert itinerary.diagnostics.provider_failures == 0
    assert itinerary.day_plans[0].accommodation.id == "g-hotel-1"
    assert itinerary.day_plans[0].meals[0].candidate_id == "g-rest-1"


def test_no_id_repeats_across_days():
    per_day = _all_ids_per_day(_generate(budget=60000, days=7))

    for i, ids in enumerate(per_day):
        for other in per_day[i + 1:]:
            assert not ids & other


def test_unknown_destination_falls_back_to_default_profile():
    itinerary = _generate(destination="Atlantis", days=3)

    assert len(itinerary.day_plans) == 3
    assert itinerary.metadata.destination == "Atlantis"
    assert itinerary.metadata.resolved_destination == "Goa"
    assert itinerary.diagnostics.fallback_destination is True


def test_destination_lookup_is_case_insensitive():
    itinerary = _generate(destination="kerala", days=2)

    assert itinerary.metadata.resolved_destination == "Kerala"
    assert itinerary.diagnostics.fallback_destination is False


def test_provider_failure_degrades_to_catalog_results():
    places = FailingPlaces()

    itinerary = _generate(places=places)

    assert itinerary.diagnostics.provider_failures == 2
    assert len(itinerary.day_plans) == 5
    catalog_ids = {e.id for e in REFERENCE.catalog}
    assert itinerary.day_plans[0].accommodation.id in catalog_ids


def test_provider_exception_is_treated_as_failure():
    itinerary = _generate(places=RaisingPlaces())

    assert itinerary.diagnostics.provider_failures == 2
    assert len(itinerary.day_plans) == 5


def test_sources_join_in_call_order_not_arrival_order():
    slow_hotels = FakePlaces(GOA_RESULTS, delays={"hotel": 0.05})

    itinerary = _generate(places=slow_hotels)

    assert itinerary.day_plans[0].accommodation.id == "g-hotel-1"
    assert itinerary.day_plans[0].meals[0].candidate_id == "g-rest-1"


def test_generation_is_reproducible():
    first = _generate()
    second = _generate()

    assert [d.model_dump() for d in first.day_plans] == [d.model_dump() for d in second.day_plans]


@pytest.mark.parametrize("budget, days", [(500, 1), (10000, 0), (10000, 31)])
def test_invalid_budget_fails_before_any_provider_call(budget, days):
    places = FakePlaces(GOA_RESULTS)

    with pytest.raises(InvalidBudget):
        _generate(budget=budget, days=days, places=places)
    assert places.calls == []


def test_unsupported_language_fails_before_any_provider_call():
    places = FakePlaces(GOA_RESULTS)

    with pytest.raises(UnsupportedLanguage):
        _generate(language="Klingon", places=places)
    assert places.calls == []


def test_invalid_start_date_is_rejected():
    with pytest.raises(InvalidStartDate):
        _generate(start="next tuesday")


def test_search_hotels_filters_and_ranks():
    places = FakePlaces({
        "hotel": [
            _place("cheap", 15.49, 73.83, 4.2, price_level=1),
            _place("posh", 15.49, 73.83, 4.9, price_level=4),
            _place("far", 16.50, 73.83, 4.8, price_level=2),
        ]
    })

    data = asyncio.run(
        orchestrator.search_hotels(15.4909, 73.8278, budget="budget", radius_km=10, reference=REFERENCE, places=places)
    )

    ids = [h["id"] for h in data["hotels"]]
    assert "posh" not in ids
    assert "far" not in ids
    assert ids[0] in {"cheap", "cat-goa-hotel-1", "cat-goa-hotel-2"}
    assert data["total_found"] == len(ids)
    assert places.calls[0][1] == 10000


def test_search_restaurants_passes_cuisine_and_recommends():
    places = FakePlaces({"restaurant": [_place("veg", 15.49, 73.83, 4.8)]})

    data = asyncio.run(
        orchestrator.search_restaurants(15.4909, 73.8278, cuisine="Goan", reference=REFERENCE, places=places)
    )

    assert places.calls[0][2] == "Goan"
    assert data["restaurants"][0]["id"] == "veg"
    assert len(data["recommendations"]) == 3


def test_search_rejects_invalid_coordinates():
    with pytest.raises(InvalidCoordinate):
        asyncio.run(orchestrator.search_hotels(95.0, 10.0, reference=REFERENCE, places=FakePlaces()))


class FakeDirections:
    def __init__(self, distance_km: Optional[float]):
        self.distance_km = distance_km

    async def route(self, origin, destination, mode="driving"):
        if self.distance_km is None:
            return ProviderResult.failed("directions", "status NOT_FOUND")
        return ProviderResult(
            source="directions",
            items=[RouteInfo(distance_km=self.distance_km, duration_min=self.distance_km * 3)],
        )


def test_search_transport_prices_and_orders_operators():
    data = asyncio.run(
        orchestrator.search_transport("Panaji", "Calangute", reference=REFERENCE, directions=FakeDirections(5))
    )

    options = data["transport_options"]
    assert options[0]["category"] == "Auto Rickshaw"
    assert options[0]["estimated_cost"] == 65
    assert all(o["available"] for o in options)
    assert [o["estimated_cost"] for o in options] == sorted(o["estimated_cost"] for o in options)
    assert data["recommendations"][0].startswith("Cab services")


def test_search_transport_marks_out_of_range_operators_unavailable():
    data = asyncio.run(
        orchestrator.search_transport("Panaji", "Margao", reference=REFERENCE, directions=FakeDirections(12))
    )

    options = data["transport_options"]
    assert [o["available"] for o in options][-2:] == [False, False]
    assert {o["category"] for o in options[-2:]} == {"Auto Rickshaw", "Rapido Auto"}


def test_search_transport_filters_by_mode_and_handles_missing_route():
    cabs = asyncio.run(
        orchestrator.search_transport("A", "B", "cab", reference=REFERENCE, directions=FakeDirections(3))
    )
    assert {o["type"] for o in cabs["transport_options"]} == {"cab"}

    missing = asyncio.run(
        orchestrator.search_transport("A", "Nowhere", reference=REFERENCE, directions=FakeDirections(None))
    )
    assert missing is None


class EmptyCatalog:
    async def fetch(self, kind, **filters):
        return ProviderResult(source=f"catalog:{kind}", items=[])


def test_in_tier_hotel_survives_a_crowd_of_better_rated_ones():
    crowd = [_place(f"posh-{i}", 15.4909 + i * 0.001, 73.8278, 4.9, price_level=5) for i in range(20)]
    places = FakePlaces({"hotel": crowd + [_place("hostel", 15.50, 73.83, 3.0, price_level=1)]})

    itinerary = asyncio.run(
        orchestrator.generate_itinerary(
            10000, 5, "Goa", "2025-11-01", reference=REFERENCE, places=places, catalog=EmptyCatalog()
        )
    )

    stays = [d.accommodation for d in itinerary.day_plans]
    assert stays[0].tier == "budget"
    assert stays[0].id == "hostel"
    assert [s.id for s in stays[1:]] == [f"budget-stay-day{n}" for n in range(2, 6)]
