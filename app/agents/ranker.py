"""Deterministic rule-based ranking for candidates and transport options."""
from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, List, Optional

from app.schemas import Candidate, RankFilters, RouteInfo, TransportOption

# Ratings closer than this are treated as equal and ordered by distance instead.
RATING_TOLERANCE = 0.1


def matches_budget_category(candidate: Candidate, budget_category: Optional[str]) -> bool:
    if not budget_category:
        return True
    if budget_category == "budget":
        return candidate.price_tier <= 2
    if budget_category == "mid-range":
        return candidate.price_tier == 3
    if budget_category in ("expensive", "luxury"):
        return candidate.price_tier >= 4
    return True


def compare_candidates(a: Candidate, b: Candidate) -> int:
    if abs(a.rating - b.rating) > RATING_TOLERANCE:
        return -1 if a.rating > b.rating else 1
    if a.distance_km < b.distance_km:
        return -1
    if a.distance_km > b.distance_km:
        return 1
    return 0


def rank(
    candidates: Iterable[Candidate],
    filters: Optional[RankFilters] = None,
    limit: Optional[int] = None,
) -> List[Candidate]:
    """Filter, sort and truncate ``candidates``.

    Higher rating wins unless the two ratings are within ``RATING_TOLERANCE``,
    in which case the closer candidate wins. Remaining ties keep input order.
    ``limit`` is applied after sorting.
    """
    filters = filters or RankFilters()
    kept = [
        c for c in candidates
        if matches_budget_category(c, filters.budget_category)
        and (filters.min_rating is None or c.rating >= filters.min_rating)
        and (filters.max_distance_km is None or c.distance_km <= filters.max_distance_km)
    ]
    ordered = sorted(kept, key=cmp_to_key(compare_candidates))
    if limit is not None:
        return ordered[:limit]
    return ordered


def rank_transport(options: Iterable[TransportOption]) -> List[TransportOption]:
    """Available options first, then cheapest first."""
    return sorted(options, key=lambda o: (not o.available, o.estimated_cost))


def transport_recommendations(options: List[TransportOption], route: RouteInfo) -> List[str]:
    recommendations: List[str] = []
    if route.distance_km < 2:
        recommendations.append("For short distances, auto rickshaw is most convenient")
    elif route.distance_km < 10:
        recommendations.append("Cab services offer good value for medium distances")
    else:
        recommendations.append("Consider train or bus for longer distances")

    if options:
        cheapest = min(options, key=lambda o: o.estimated_cost)
        recommendations.append(f"{cheapest.provider} offers the most economical option")

    recommendations.append("Book in advance during peak hours for better rates")
    return recommendations[:3]


def food_recommendations(restaurants: List[Candidate]) -> List[str]:
    recommendations = [
        "Try local street food for authentic flavors",
        "Visit highly-rated restaurants during off-peak hours",
        "Ask locals for hidden food gems",
    ]
    if restaurants:
        top = restaurants[0]
        recommendations.insert(0, f"Top pick nearby: {top.name} ({top.rating:.1f}★)")
    return recommendations[:3]
