"""Merge provider places and catalog entries into one candidate list."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from app.errors import InvalidCoordinate
from app.geo import LatLon, distance_km, validate_coordinate
from app.logs import get_logger
from app.reference import CatalogEntry, PriceTables
from app.schemas import Candidate, CandidateKind, GeoPoint, SourceKind

logger = get_logger(__name__)

MAPS_PLACE_LINK = "https://www.google.com/maps/place/?q=place_id:{place_id}"

_CUISINE_LABELS = {
    "indian_restaurant": "Indian",
    "chinese_restaurant": "Chinese",
    "italian_restaurant": "Italian",
    "mexican_restaurant": "Mexican",
    "japanese_restaurant": "Japanese",
    "thai_restaurant": "Thai",
    "american_restaurant": "American",
    "french_restaurant": "French",
    "mediterranean_restaurant": "Mediterranean",
    "seafood_restaurant": "Seafood",
    "vegetarian_restaurant": "Vegetarian",
    "cafe": "Cafe",
    "bakery": "Bakery",
}


@dataclass
class MergeResult:
    candidates: List[Candidate] = field(default_factory=list)
    dropped_count: int = 0


def merge_sources(
    origin: LatLon,
    provider_places: Iterable[Dict[str, Any]],
    catalog_entries: Iterable[CatalogEntry],
    kind: CandidateKind,
    pricing: PriceTables,
) -> MergeResult:
    """Normalise both feeds onto ``Candidate`` and measure distance from ``origin``.

    Provider results come first, then catalog results, each in input order.
    The same physical venue reported by both sources stays twice. Entries
    without usable coordinates are dropped and counted.
    """
    origin = validate_coordinate(*origin)
    result = MergeResult()

    for place in provider_places:
        candidate = _from_provider(place, origin, kind, pricing)
        if candidate is None:
            result.dropped_count += 1
            continue
        result.candidates.append(candidate)

    for entry in catalog_entries:
        candidate = _from_catalog(entry, origin, kind, pricing)
        if candidate is None:
            result.dropped_count += 1
            continue
        result.candidates.append(candidate)

    if result.dropped_count:
        logger.warning("Dropped %d malformed %s candidate(s) during merge", result.dropped_count, kind.value)
    logger.info("Merged %d %s candidate(s)", len(result.candidates), kind.value)
    return result


def _place_coordinates(place: Dict[str, Any]) -> Optional[LatLon]:
    geometry = place.get("geometry")
    if not isinstance(geometry, dict):
        return None
    location = geometry.get("location")
    if not isinstance(location, dict):
        return None
    lat, lon = location.get("lat"), location.get("lng")
    if lat is None or lon is None:
        return None
    try:
        return validate_coordinate(lat, lon)
    except InvalidCoordinate:
        return None


def _from_provider(
    place: Dict[str, Any],
    origin: LatLon,
    kind: CandidateKind,
    pricing: PriceTables,
) -> Optional[Candidate]:
    if not isinstance(place, dict):
        return None
    coords = _place_coordinates(place)
    place_id = place.get("place_id") or place.get("id")
    if coords is None or not place_id:
        logger.debug("Skipping provider place without id or coordinates: %s", place.get("name"))
        return None

    default_level = (
        pricing.provider_hotel_default_level if kind == CandidateKind.HOTEL
        else pricing.provider_restaurant_default_level
    )
    level = place.get("price_level") or default_level
    types = [t for t in place.get("types", []) if isinstance(t, str)]
    if kind == CandidateKind.RESTAURANT:
        category = [_CUISINE_LABELS[t] for t in types if t in _CUISINE_LABELS]
    else:
        category = types
    opening = place.get("opening_hours")
    available = opening.get("open_now") if isinstance(opening, dict) else None

    try:
        return Candidate(
            id=str(place_id),
            name=place.get("name") or "Unnamed place",
            kind=kind,
            source_kind=SourceKind.PROVIDER,
            rating=place.get("rating") or 0.0,
            price_tier=level,
            location=GeoPoint(lat=coords[0], lon=coords[1]),
            distance_km=distance_km(origin, coords),
            cost_estimate=pricing.provider_cost(kind.value, int(level)),
            category=category,
            available=available,
            address=place.get("vicinity") or place.get("formatted_address"),
            link=MAPS_PLACE_LINK.format(place_id=place_id),
        )
    except (ValidationError, TypeError, ValueError):
        logger.debug("Provider place %s failed validation", place_id, exc_info=True)
        return None


def _catalog_level_and_cost(entry: CatalogEntry, kind: CandidateKind, pricing: PriceTables) -> Tuple[int, float]:
    if kind == CandidateKind.HOTEL and entry.price_per_night is not None:
        return pricing.level_for_night_price(entry.price_per_night), entry.price_per_night
    level = pricing.catalog_range_levels.get(entry.price_range, 2)
    if kind == CandidateKind.HOTEL:
        return level, pricing.provider_cost("hotel", level)
    return level, pricing.catalog_restaurant_costs.get(entry.price_range, pricing.default_restaurant_cost)


def _from_catalog(
    entry: CatalogEntry,
    origin: LatLon,
    kind: CandidateKind,
    pricing: PriceTables,
) -> Optional[Candidate]:
    if entry.lat is None or entry.lon is None:
        logger.debug("Skipping catalog entry %s without coordinates", entry.id)
        return None
    try:
        coords = validate_coordinate(entry.lat, entry.lon)
    except InvalidCoordinate:
        logger.debug("Skipping catalog entry %s with invalid coordinates", entry.id)
        return None

    level, cost = _catalog_level_and_cost(entry, kind, pricing)
    try:
        return Candidate(
            id=entry.id,
            name=entry.name,
            kind=kind,
            source_kind=SourceKind.CATALOG,
            rating=entry.rating or 0.0,
            price_tier=level,
            location=GeoPoint(lat=coords[0], lon=coords[1]),
            distance_km=distance_km(origin, coords),
            cost_estimate=cost,
            category=list(entry.cuisine) if kind == CandidateKind.RESTAURANT else list(entry.amenities),
            address=entry.address,
            link=entry.website,
        )
    except ValidationError:
        logger.debug("Catalog entry %s failed validation", entry.id, exc_info=True)
        return None
