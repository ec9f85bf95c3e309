from enum import Enum
from typing import List, Dict, Literal, Optional, Tuple
from pydantic import BaseModel, Field, AliasChoices, ConfigDict, model_validator

# ------- Candidates -------
class SourceKind(str, Enum):
    PROVIDER = "provider"
    CATALOG = "catalog"
    PLACEHOLDER = "placeholder"

class CandidateKind(str, Enum):
    HOTEL = "hotel"
    RESTAURANT = "restaurant"
    ACTIVITY = "activity"
    TRANSPORT = "transport"

class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    def as_tuple(self) -> tuple:
        return (self.lat, self.lon)

class Candidate(BaseModel):
    """One point of interest; ``source_kind`` says where it came from."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: CandidateKind
    source_kind: SourceKind
    rating: float = Field(0.0, ge=0, le=5)
    price_tier: int = Field(1, ge=1, le=5)
    location: Optional[GeoPoint] = None
    distance_km: float = Field(0.0, ge=0)
    cost_estimate: float = Field(0.0, ge=0)
    category: List[str] = Field(default_factory=list)
    available: Optional[bool] = None
    address: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None

BudgetCategory = Literal["budget", "mid-range", "expensive", "luxury"]

class RankFilters(BaseModel):
    budget_category: Optional[BudgetCategory] = None
    min_rating: Optional[float] = None
    max_distance_km: Optional[float] = None

# ------- Budget -------
class CategoryShares(BaseModel):
    model_config = ConfigDict(frozen=True)

    accommodation: int = 35
    food: int = 25
    transport: int = 20
    activities: int = 15
    miscellaneous: int = 5

    @model_validator(mode="after")
    def _sum_to_hundred(self):
        total = self.accommodation + self.food + self.transport + self.activities + self.miscellaneous
        if total != 100:
            raise ValueError(f"category shares must sum to 100, got {total}")
        return self

class CategoryBudget(BaseModel):
    model_config = ConfigDict(frozen=True)

    accommodation: int
    food: int
    transport: int
    activities: int
    miscellaneous: int

    def total(self) -> int:
        return self.accommodation + self.food + self.transport + self.activities + self.miscellaneous

class BudgetPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_budget: float
    days: int
    categories: CategoryBudget
    daily_budget: float
    residual: float = 0.0

# ------- Day plans -------
class SlotName(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: SlotName
    start_time: str
    budget_window: float
    assigned: Tuple[Candidate, ...] = ()
    spent: float = 0.0
    tips: Tuple[str, ...] = ()

class Accommodation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    tier: Literal["budget", "mid_range", "luxury"]
    location: str
    cost: float
    rating: float = 0.0
    amenities: Tuple[str, ...] = ()

class Meal(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["breakfast", "lunch", "dinner"]
    name: str
    location: str
    cost: float
    cuisine: str = "Local"
    rating: float = 0.0
    candidate_id: Optional[str] = None

class TransportLeg(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    frm: str = Field(..., alias="from")
    to: str
    mode: str
    cost: float
    duration: Optional[str] = None
    provider: Optional[str] = None

class DayPlan(BaseModel):
    """One scheduled day; frozen once the scheduler has built it."""
    model_config = ConfigDict(frozen=True)

    day_index: int
    date: str
    morning: TimeSlot
    afternoon: TimeSlot
    evening: TimeSlot
    accommodation: Accommodation
    meals: Tuple[Meal, ...] = ()
    transport: Tuple[TransportLeg, ...] = ()
    total_cost: float = 0.0

    def slots(self) -> List[TimeSlot]:
        return [self.morning, self.afternoon, self.evening]

# ------- Itinerary -------
class PlanDiagnostics(BaseModel):
    model_config = ConfigDict(frozen=True)

    dropped_count: int = 0
    provider_failures: int = 0
    placeholder_slots: int = 0
    fallback_destination: bool = False

class ItineraryMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    destination: str
    resolved_destination: str
    days: int
    budget: float
    language: str
    generated_by: str = "trip-planner"
    generated_at: str

class Itinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: ItineraryMetadata
    summary: str
    day_plans: Tuple[DayPlan, ...]
    total_estimated_cost: float
    budget_breakdown: CategoryBudget
    tips: Tuple[str, ...] = ()
    emergency_contacts: Dict[str, str] = Field(default_factory=dict)
    weather_info: Dict[str, str] = Field(default_factory=dict)
    local_info: Dict[str, str] = Field(default_factory=dict)
    diagnostics: PlanDiagnostics = PlanDiagnostics()

# ------- Request models -------
class ItineraryRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    budget: float = Field(..., validation_alias=AliasChoices("budget", "budget_total"))
    days: int
    destination: str = Field(..., min_length=2)
    start_date: str = Field(..., validation_alias=AliasChoices("start_date", "startDate"))
    language: str = "English"

# ------- Transport search -------
class RouteInfo(BaseModel):
    distance_km: float
    duration_min: float
    distance_text: Optional[str] = None
    duration_text: Optional[str] = None
    start_address: Optional[str] = None
    end_address: Optional[str] = None

class TransportOption(BaseModel):
    provider: str
    type: str
    category: str
    estimated_cost: float
    estimated_time: Optional[str] = None
    available: bool = True
    booking_link: Optional[str] = None
    features: List[str] = Field(default_factory=list)
