# app/orchestrator.py
from __future__ import annotations

from datetime import date
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple
import asyncio

from app.agents.budget_allocator import allocate
from app.agents.itinerary_assembler import ItineraryAssembler
from app.agents.ranker import food_recommendations, rank, rank_transport, transport_recommendations
from app.agents.slot_scheduler import SlotScheduler
from app.agents.source_merger import merge_sources
from app.config import get_settings
from app.errors import InvalidStartDate
from app.geo import validate_coordinate
from app.logs import get_logger
from app.reference import ReferenceData, load_reference_data
from app.schemas import CandidateKind, Itinerary, PlanDiagnostics, RankFilters, TransportOption
from app.tools.catalog import CatalogStore
from app.tools.directions import DirectionsClient
from app.tools.places import PlacesClient
from app.tools.results import ProviderResult

logger = get_logger(__name__)

HOTEL_RESULT_LIMIT = 20
RESTAURANT_RESULT_LIMIT = 25


def _reference(reference: Optional[ReferenceData]) -> ReferenceData:
    if reference is not None:
        return reference
    return load_reference_data(get_settings().reference_data_path)


async def _gather_sources(calls: Sequence[Tuple[str, Awaitable[ProviderResult]]]) -> List[ProviderResult]:
    """Run independent reads concurrently and return results in call order.

    A call that raises is turned into a failed result for its source so one
    broken feed never aborts the others.
    """
    outcomes = await asyncio.gather(*[call for _, call in calls], return_exceptions=True)
    results: List[ProviderResult] = []
    for (source, _), outcome in zip(calls, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning("Source %s raised; continuing without it", source, exc_info=outcome)
            results.append(ProviderResult.failed(source, repr(outcome)))
            continue
        if not outcome.ok:
            logger.warning("Source %s unavailable (%s); continuing with partial results", source, outcome.error)
        results.append(outcome)
    return results


def _parse_start_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise InvalidStartDate(f"Start date {value!r} is not an ISO date") from exc


# ---------- itinerary generation ----------
async def generate_itinerary(
    budget: Any,
    days: Any,
    destination: str,
    start_date: Any,
    language: str = "English",
    *,
    reference: Optional[ReferenceData] = None,
    places: Optional[PlacesClient] = None,
    catalog: Optional[CatalogStore] = None,
) -> Itinerary:
    """Plan a multi-day itinerary for ``destination`` within ``budget``.

    Budget, day-count, language and date problems raise before any provider
    is contacted. Provider failures only shrink the candidate pools.
    """
    reference = _reference(reference)
    settings = get_settings()

    reference.require_language(language)
    plan = allocate(
        budget,
        days,
        reference.category_shares,
        min_budget=reference.min_budget,
        max_days=reference.max_days,
    )
    start = _parse_start_date(start_date)
    dest_key, profile, matched = reference.lookup_destination(destination)
    if not matched:
        logger.warning("Unknown destination %r; using default profile %s", destination, dest_key)

    logger.info(
        "Generating itinerary for %s (%s), %d day(s) from %s, budget %.2f, language %s",
        destination,
        dest_key,
        plan.days,
        start.isoformat(),
        plan.total_budget,
        language,
    )

    places = places or PlacesClient()
    catalog = catalog or CatalogStore(reference)
    center = profile.center.as_tuple()
    hotel_p, rest_p, hotel_c, rest_c = await _gather_sources([
        ("places:hotel", places.search(center[0], center[1], int(settings.hotel_radius_km * 1000), "hotel")),
        ("places:restaurant", places.search(center[0], center[1], int(settings.restaurant_radius_km * 1000), "restaurant")),
        ("catalog:hotel", catalog.fetch("hotel", city=dest_key)),
        ("catalog:restaurant", catalog.fetch("restaurant", city=dest_key)),
    ])
    provider_failures = sum(1 for r in (hotel_p, rest_p, hotel_c, rest_c) if not r.ok)

    hotels = merge_sources(center, hotel_p.items, hotel_c.items, CandidateKind.HOTEL, reference.pricing)
    restaurants = merge_sources(center, rest_p.items, rest_c.items, CandidateKind.RESTAURANT, reference.pricing)

    # full pools: the scheduler filters by tier and used ids before picking
    scheduled = SlotScheduler(reference).schedule(
        plan,
        profile,
        start,
        hotels=rank(hotels.candidates),
        restaurants=rank(restaurants.candidates),
    )

    diagnostics = PlanDiagnostics(
        dropped_count=hotels.dropped_count + restaurants.dropped_count,
        provider_failures=provider_failures,
        placeholder_slots=scheduled.placeholder_slots,
        fallback_destination=not matched,
    )
    itinerary = ItineraryAssembler(reference).assemble(
        destination=destination,
        profile=profile,
        language=language,
        plan=plan,
        day_plans=scheduled.day_plans,
        diagnostics=diagnostics,
    )
    logger.info(
        "Itinerary ready: %d day(s), estimated %.2f against budget %.2f (%d provider failure(s))",
        len(itinerary.day_plans),
        itinerary.total_estimated_cost,
        plan.total_budget,
        provider_failures,
    )
    return itinerary


# ---------- ranked searches ----------
async def search_hotels(
    lat: float,
    lon: float,
    budget: Optional[str] = None,
    min_rating: float = 0.0,
    radius_km: float = 10,
    *,
    reference: Optional[ReferenceData] = None,
    places: Optional[PlacesClient] = None,
    catalog: Optional[CatalogStore] = None,
) -> Dict[str, Any]:
    reference = _reference(reference)
    origin = validate_coordinate(lat, lon)
    places = places or PlacesClient()
    catalog = catalog or CatalogStore(reference)
    logger.info("Searching hotels near %.4f, %.4f", origin[0], origin[1])

    provider, local = await _gather_sources([
        ("places:hotel", places.search(origin[0], origin[1], int(radius_km * 1000), "hotel")),
        ("catalog:hotel", catalog.fetch("hotel", min_rating=min_rating)),
    ])
    merged = merge_sources(origin, provider.items, local.items, CandidateKind.HOTEL, reference.pricing)
    filters = RankFilters(budget_category=budget, min_rating=min_rating or None, max_distance_km=radius_km)
    ranked = rank(merged.candidates, filters)
    return {
        "hotels": [c.model_dump(mode="json") for c in ranked[:HOTEL_RESULT_LIMIT]],
        "search_location": {"latitude": origin[0], "longitude": origin[1]},
        "filters": {"budget": budget, "rating": min_rating, "radius": radius_km},
        "total_found": len(ranked),
        "diagnostics": {
            "dropped_count": merged.dropped_count,
            "provider_failures": sum(1 for r in (provider, local) if not r.ok),
        },
    }


async def search_restaurants(
    lat: float,
    lon: float,
    budget: Optional[str] = None,
    cuisine: Optional[str] = None,
    min_rating: float = 0.0,
    radius_km: float = 5,
    *,
    reference: Optional[ReferenceData] = None,
    places: Optional[PlacesClient] = None,
    catalog: Optional[CatalogStore] = None,
) -> Dict[str, Any]:
    reference = _reference(reference)
    origin = validate_coordinate(lat, lon)
    places = places or PlacesClient()
    catalog = catalog or CatalogStore(reference)
    logger.info("Searching restaurants near %.4f, %.4f (cuisine=%s)", origin[0], origin[1], cuisine or "any")

    provider, local = await _gather_sources([
        ("places:restaurant", places.search(origin[0], origin[1], int(radius_km * 1000), "restaurant", cuisine=cuisine)),
        ("catalog:restaurant", catalog.fetch("restaurant", min_rating=min_rating, cuisine=cuisine)),
    ])
    merged = merge_sources(origin, provider.items, local.items, CandidateKind.RESTAURANT, reference.pricing)
    filters = RankFilters(budget_category=budget, min_rating=min_rating or None, max_distance_km=radius_km)
    ranked = rank(merged.candidates, filters)
    top = ranked[:RESTAURANT_RESULT_LIMIT]
    return {
        "restaurants": [c.model_dump(mode="json") for c in top],
        "search_location": {"latitude": origin[0], "longitude": origin[1]},
        "filters": {"budget": budget, "cuisine": cuisine, "rating": min_rating, "radius": radius_km},
        "total_found": len(ranked),
        "recommendations": food_recommendations(top[:5]),
        "diagnostics": {
            "dropped_count": merged.dropped_count,
            "provider_failures": sum(1 for r in (provider, local) if not r.ok),
        },
    }


async def search_transport(
    origin: str,
    destination: str,
    mode: str = "all",
    *,
    reference: Optional[ReferenceData] = None,
    directions: Optional[DirectionsClient] = None,
) -> Optional[Dict[str, Any]]:
    """Price fare-table operators over the routed distance; ``None`` when no route is found."""
    reference = _reference(reference)
    directions = directions or DirectionsClient()
    logger.info("Searching transport from %s to %s, mode: %s", origin, destination, mode)

    routed = await directions.route(origin, destination)
    if not routed.ok or not routed.items:
        logger.warning("No route between %s and %s", origin, destination)
        return None
    route = routed.items[0]

    options: List[TransportOption] = []
    for fare in reference.fares:
        if mode not in ("all", fare.type):
            continue
        available = fare.max_distance_km is None or route.distance_km < fare.max_distance_km
        options.append(TransportOption(
            provider=fare.provider,
            type=fare.type,
            category=fare.category,
            estimated_cost=round(route.distance_km * fare.per_km + fare.base),
            estimated_time=fare.estimated_time,
            available=available,
            booking_link=fare.booking_link,
            features=list(fare.features),
        ))

    ranked = rank_transport(options)
    return {
        "route": {
            "origin": origin,
            "destination": destination,
            "distance": route.distance_km,
            "estimated_duration": route.duration_min,
        },
        "transport_options": [o.model_dump(mode="json") for o in ranked],
        "recommendations": transport_recommendations(ranked, route),
    }
