"""Day-by-day slot scheduling under budget windows and a no-repeat rule."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set

from app.agents.ranker import rank
from app.errors import NoCandidatesAvailable
from app.geo import distance_km
from app.logs import get_logger
from app.reference import ActivityEntry, DestinationProfile, ReferenceData
from app.schemas import (
    Accommodation,
    BudgetPlan,
    Candidate,
    CandidateKind,
    DayPlan,
    GeoPoint,
    Meal,
    RankFilters,
    SlotName,
    SourceKind,
    TimeSlot,
    TransportLeg,
)

logger = get_logger(__name__)

SLOT_ORDER = (SlotName.MORNING, SlotName.AFTERNOON, SlotName.EVENING)

_TIER_FILTER = {"budget": "budget", "mid_range": "mid-range", "luxury": "luxury"}


@dataclass
class ScheduleResult:
    day_plans: List[DayPlan] = field(default_factory=list)
    placeholder_slots: int = 0


def fill_slot(pool: Iterable[Candidate], window: float) -> List[Candidate]:
    """Greedily take candidates in order while the running cost stays within ``window``.

    Candidates that would overflow the remaining window are skipped, not fatal.
    Raises ``NoCandidatesAvailable`` when nothing fits at all.
    """
    assigned: List[Candidate] = []
    spent = 0.0
    for candidate in pool:
        if spent + candidate.cost_estimate > window:
            logger.debug("Skipping %s (cost %.2f); window %.2f has %.2f left",
                         candidate.id, candidate.cost_estimate, window, window - spent)
            continue
        assigned.append(candidate)
        spent += candidate.cost_estimate
    if not assigned:
        raise NoCandidatesAvailable(f"No candidate fits a window of {window:.2f}")
    return assigned


class SlotScheduler:
    """Assigns ranked candidates to morning/afternoon/evening slots for every day.

    A single ``used_ids`` set spans the whole itinerary: anything placed on one
    day (activities, stays, restaurants, transport) is excluded from every later
    pool. Accommodation, meals and transport are derived from the category
    budget divided by the number of days; slot windows come from the daily
    budget. The two views are intentionally not reconciled.
    """

    def __init__(self, reference: ReferenceData):
        self.reference = reference

    def schedule(
        self,
        plan: BudgetPlan,
        profile: DestinationProfile,
        start_date: date,
        *,
        hotels: Iterable[Candidate] = (),
        restaurants: Iterable[Candidate] = (),
    ) -> ScheduleResult:
        used_ids: Set[str] = set()
        result = ScheduleResult()
        activity_pools = self._activity_pools(profile)
        hotels = list(hotels)
        restaurants = rank(restaurants)

        for day_index in range(1, plan.days + 1):
            current = start_date + timedelta(days=day_index - 1)
            day_plan, placeholders = self._plan_day(
                day_index, current, plan, profile, activity_pools, hotels, restaurants, used_ids
            )
            result.day_plans.append(day_plan)
            result.placeholder_slots += placeholders
            logger.debug("Day %d complete, total %.2f", day_index, day_plan.total_cost)

        logger.info(
            "Scheduled %d day(s) for %s; %d slot(s) fell back to placeholders",
            plan.days,
            profile.name,
            result.placeholder_slots,
        )
        return result

    # ---------- per-day state walk ----------
    def _plan_day(
        self,
        day_index: int,
        current: date,
        plan: BudgetPlan,
        profile: DestinationProfile,
        activity_pools: Dict[SlotName, List[Candidate]],
        hotels: List[Candidate],
        restaurants: List[Candidate],
        used_ids: Set[str],
    ):
        slots: Dict[SlotName, TimeSlot] = {}
        placeholders = 0

        # morning -> afternoon -> evening, then stay, meals and transport
        for slot_name in SLOT_ORDER:
            window_cfg = self.reference.slot_windows[slot_name]
            window = plan.daily_budget * window_cfg.share
            pool = [c for c in activity_pools.get(slot_name, []) if c.id not in used_ids]
            try:
                assigned = fill_slot(pool, window)
            except NoCandidatesAvailable:
                logger.warning("Day %d %s: no candidate fits; using free-time placeholder", day_index, slot_name.value)
                assigned = [self._placeholder(day_index, slot_name, profile)]
                placeholders += 1
            used_ids.update(c.id for c in assigned)
            slots[slot_name] = TimeSlot(
                name=slot_name,
                start_time=window_cfg.start_time,
                budget_window=round(window, 2),
                assigned=assigned,
                spent=round(sum(c.cost_estimate for c in assigned), 2),
                tips=list(self.reference.activity_tips),
            )

        accommodation = self._accommodation(day_index, plan, profile, hotels, used_ids)
        meals = self._meals(plan, restaurants, used_ids)
        transport = self._transport(day_index, plan, used_ids)

        total = (
            sum(slot.spent for slot in slots.values())
            + accommodation.cost
            + sum(meal.cost for meal in meals)
            + sum(leg.cost for leg in transport)
        )
        day_plan = DayPlan(
            day_index=day_index,
            date=current.isoformat(),
            morning=slots[SlotName.MORNING],
            afternoon=slots[SlotName.AFTERNOON],
            evening=slots[SlotName.EVENING],
            accommodation=accommodation,
            meals=meals,
            transport=transport,
            total_cost=round(total, 2),
        )
        return day_plan, placeholders

    # ---------- pools ----------
    def _activity_pools(self, profile: DestinationProfile) -> Dict[SlotName, List[Candidate]]:
        pools: Dict[SlotName, List[Candidate]] = {}
        for slot_name in SLOT_ORDER:
            entries = profile.activities.get(slot_name, [])
            candidates = [self._activity_candidate(entry, profile) for entry in entries]
            pools[slot_name] = rank(candidates)
        return pools

    @staticmethod
    def _activity_candidate(entry: ActivityEntry, profile: DestinationProfile) -> Candidate:
        center = profile.center.as_tuple()
        if entry.lat is not None and entry.lon is not None:
            location = GeoPoint(lat=entry.lat, lon=entry.lon)
            dist = distance_km(center, location.as_tuple())
        else:
            location = profile.center
            dist = 0.0
        return Candidate(
            id=entry.id,
            name=entry.name,
            kind=CandidateKind.ACTIVITY,
            source_kind=SourceKind.CATALOG,
            rating=entry.rating,
            price_tier=entry.price_tier,
            location=location,
            distance_km=dist,
            cost_estimate=entry.cost,
            address=entry.location,
            description=entry.description,
            duration=entry.duration,
        )

    @staticmethod
    def _placeholder(day_index: int, slot_name: SlotName, profile: DestinationProfile) -> Candidate:
        return Candidate(
            id=f"free-time-day{day_index}-{slot_name.value}",
            name=f"Free time to explore {profile.name}",
            kind=CandidateKind.ACTIVITY,
            source_kind=SourceKind.PLACEHOLDER,
            location=profile.center,
            cost_estimate=0.0,
            description="No bookable activity fits this slot; wander, rest or revisit a favourite spot.",
        )

    # ---------- stay / meals / transport ----------
    def _accommodation(
        self,
        day_index: int,
        plan: BudgetPlan,
        profile: DestinationProfile,
        hotels: List[Candidate],
        used_ids: Set[str],
    ) -> Accommodation:
        share = plan.categories.accommodation / plan.days
        table = self.reference.accommodation
        tier_name = table.tier_for(share)
        tier = table.tiers[tier_name]

        pool = rank(hotels, RankFilters(budget_category=_TIER_FILTER[tier_name]))
        hotel: Optional[Candidate] = next((h for h in pool if h.id not in used_ids), None)
        if hotel is not None:
            used_ids.add(hotel.id)
            cost = min(share, tier.nominal_cost, hotel.cost_estimate or tier.nominal_cost)
            return Accommodation(
                id=hotel.id,
                name=hotel.name,
                type=tier.type,
                tier=tier_name,
                location=hotel.address or f"{profile.name} City Center",
                cost=round(cost, 2),
                rating=hotel.rating,
                amenities=list(hotel.category) or list(tier.amenities),
            )

        stay_id = f"{tier_name}-stay-day{day_index}"
        used_ids.add(stay_id)
        return Accommodation(
            id=stay_id,
            name=tier.name,
            type=tier.type,
            tier=tier_name,
            location=f"{profile.name} City Center",
            cost=round(min(share, tier.nominal_cost), 2),
            rating=tier.rating,
            amenities=list(tier.amenities),
        )

    def _meals(self, plan: BudgetPlan, restaurants: List[Candidate], used_ids: Set[str]) -> List[Meal]:
        share = plan.categories.food / plan.days
        meals: List[Meal] = []
        for template in self.reference.meals:
            restaurant = next((r for r in restaurants if r.id not in used_ids), None)
            cost = round(share * template.share, 2)
            if restaurant is None:
                meals.append(Meal(
                    type=template.type,
                    name=template.name,
                    location=template.location,
                    cost=cost,
                    cuisine=template.cuisine,
                    rating=template.rating,
                ))
                continue
            used_ids.add(restaurant.id)
            meals.append(Meal(
                type=template.type,
                name=restaurant.name,
                location=restaurant.address or template.location,
                cost=cost,
                cuisine=restaurant.category[0] if restaurant.category else template.cuisine,
                rating=restaurant.rating,
                candidate_id=restaurant.id,
            ))
        return meals

    def _transport(self, day_index: int, plan: BudgetPlan, used_ids: Set[str]) -> List[TransportLeg]:
        share = plan.categories.transport / plan.days
        legs: List[TransportLeg] = []
        for template in self.reference.transport_legs:
            leg_id = f"transport-day{day_index}-{template.key}"
            used_ids.add(leg_id)
            legs.append(TransportLeg(
                id=leg_id,
                **{"from": template.frm},
                to=template.to,
                mode=template.mode,
                cost=round(share * template.share, 2),
                duration=template.duration,
                provider=template.provider,
            ))
        return legs
