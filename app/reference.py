"""Read-only reference data: destination profiles, price tables, templates.

Tunable tables live in ``app/data/reference.json``
and are loaded once into frozen models. Callers pass a ``ReferenceData``
instance into each stage so tests and deployments can swap it out.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.errors import UnsupportedLanguage
from app.logs import get_logger
from app.schemas import CategoryShares, GeoPoint, SlotName

logger = get_logger(__name__)

DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parent / "data" / "reference.json"

TierName = Literal["budget", "mid_range", "luxury"]
PriceRange = Literal["BUDGET", "MID_RANGE", "EXPENSIVE"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ActivityEntry(_Frozen):
    id: str
    name: str
    description: str = ""
    location: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    cost: float = 0.0
    duration: Optional[str] = None
    rating: float = 0.0
    price_tier: int = 1


class TierCosts(_Frozen):
    budget: float
    mid_range: float
    luxury: float


class DestinationProfile(_Frozen):
    name: str
    type: str = ""
    best_time: str = ""
    climate: str = ""
    currency: str = "INR"
    language: str = ""
    center: GeoPoint
    attractions: List[str] = Field(default_factory=list)
    activities: Dict[SlotName, List[ActivityEntry]] = Field(default_factory=dict)
    avg_hotel_cost: Optional[TierCosts] = None
    avg_meal_cost: Optional[TierCosts] = None
    local_police: Optional[str] = None


class AccommodationTier(_Frozen):
    name: str
    type: str
    nominal_cost: float
    rating: float = 0.0
    amenities: List[str] = Field(default_factory=list)


class AccommodationTable(_Frozen):
    budget_max: float = 2000
    mid_range_max: float = 5000
    tiers: Dict[TierName, AccommodationTier]

    def tier_for(self, per_day_share: float) -> TierName:
        if per_day_share <= self.budget_max:
            return "budget"
        if per_day_share <= self.mid_range_max:
            return "mid_range"
        return "luxury"


class SlotWindow(_Frozen):
    share: float
    start_time: str


class MealTemplate(_Frozen):
    type: Literal["breakfast", "lunch", "dinner"]
    name: str
    location: str
    share: float
    cuisine: str = "Local"
    rating: float = 0.0


class TransportTemplate(_Frozen):
    key: str
    frm: str = Field(..., alias="from")
    to: str
    mode: str
    share: float
    duration: Optional[str] = None
    provider: Optional[str] = None


class PriceTables(_Frozen):
    provider_hotel_default_level: int = 1
    provider_restaurant_default_level: int = 2
    provider_hotel_costs: List[float]
    provider_restaurant_costs: List[float]
    catalog_range_levels: Dict[PriceRange, int]
    catalog_restaurant_costs: Dict[PriceRange, float]
    hotel_night_price_levels: List[Tuple[float, int]]
    default_restaurant_cost: float = 800
    default_hotel_cost: float = 4000

    def level_for_night_price(self, price: float) -> int:
        for ceiling, level in self.hotel_night_price_levels:
            if price <= ceiling:
                return level
        return 5

    def provider_cost(self, kind: str, level: int) -> float:
        table = self.provider_hotel_costs if kind == "hotel" else self.provider_restaurant_costs
        default = self.default_hotel_cost if kind == "hotel" else self.default_restaurant_cost
        if 1 <= level <= len(table):
            return table[level - 1]
        return default


class FareOperator(_Frozen):
    provider: str
    type: Literal["cab", "auto"]
    category: str
    base: float
    per_km: float
    max_distance_km: Optional[float] = None
    estimated_time: Optional[str] = None
    booking_link: Optional[str] = None
    features: List[str] = Field(default_factory=list)


class CatalogEntry(_Frozen):
    id: str
    name: str
    kind: Literal["hotel", "restaurant"]
    city: str = ""
    address: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    rating: Optional[float] = None
    price_range: PriceRange = "BUDGET"
    price_per_night: Optional[float] = None
    cuisine: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    website: Optional[str] = None
    is_active: bool = True


class LanguageTemplates(_Frozen):
    summary: str
    tips: List[str]
    local_info: Dict[str, str] = Field(default_factory=dict)


class LocalizationTable(_Frozen):
    supported: List[str]
    fallback: str = "English"
    templates: Dict[str, LanguageTemplates]


class ReferenceData(_Frozen):
    default_destination: str
    destinations: Dict[str, DestinationProfile]
    category_shares: CategoryShares = CategoryShares()
    min_budget: float = 1000
    max_days: int = 30
    slot_windows: Dict[SlotName, SlotWindow]
    accommodation: AccommodationTable
    meals: List[MealTemplate]
    transport_legs: List[TransportTemplate]
    activity_tips: List[str] = Field(default_factory=list)
    pricing: PriceTables
    fares: List[FareOperator] = Field(default_factory=list)
    catalog: List[CatalogEntry] = Field(default_factory=list)
    localization: LocalizationTable
    emergency_contacts: Dict[str, str] = Field(default_factory=dict)
    weather_info: Dict[str, str] = Field(default_factory=dict)

    def lookup_destination(self, name: str) -> Tuple[str, DestinationProfile, bool]:
        """Return ``(key, profile, matched)``; unknown names resolve to the default profile."""
        wanted = (name or "").strip().lower()
        for key, profile in self.destinations.items():
            if key.lower() == wanted or profile.name.lower() == wanted:
                return key, profile, True
        key = self.default_destination
        return key, self.destinations[key], False

    def require_language(self, language: str) -> str:
        if language not in self.localization.supported:
            raise UnsupportedLanguage(
                f"Language '{language}' is not supported; choose one of {', '.join(self.localization.supported)}"
            )
        return language

    def templates(self, language: str) -> LanguageTemplates:
        self.require_language(language)
        table = self.localization.templates
        return table.get(language) or table[self.localization.fallback]


def parse_reference_data(raw: Dict) -> ReferenceData:
    return ReferenceData.model_validate(raw)


@lru_cache(maxsize=4)
def _load_cached(path: str) -> ReferenceData:
    with open(path, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    data = parse_reference_data(raw)
    logger.info(
        "Loaded reference data from %s (%d destinations, %d catalog entries)",
        path,
        len(data.destinations),
        len(data.catalog),
    )
    return data


def load_reference_data(path: Optional[str] = None) -> ReferenceData:
    """Load reference data from ``path`` (or the bundled file); cached per path."""
    return _load_cached(str(Path(path) if path else DEFAULT_REFERENCE_PATH))
