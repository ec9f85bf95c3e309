from app.agents.ranker import rank, rank_transport, transport_recommendations
from app.schemas import Candidate, CandidateKind, RankFilters, RouteInfo, SourceKind, TransportOption


def _cand(cid: str, rating: float, distance: float, tier: int = 1) -> Candidate:
    return Candidate(
        id=cid,
        name=cid.title(),
        kind=CandidateKind.HOTEL,
        source_kind=SourceKind.PROVIDER,
        rating=rating,
        price_tier=tier,
        distance_km=distance,
    )


def test_close_ratings_fall_back_to_distance():
    higher_but_far = _cand("far", 4.35, 3.0)
    lower_but_near = _cand("near", 4.3, 1.0)

    ranked = rank([higher_but_far, lower_but_near])

    assert [c.id for c in ranked] == ["near", "far"]


def test_clear_rating_gap_beats_distance():
    ranked = rank([_cand("near", 4.0, 0.5), _cand("far", 4.6, 9.0)])
    assert [c.id for c in ranked] == ["far", "near"]


def test_ranking_is_stable_and_repeatable():
    candidates = [
        _cand("a", 4.0, 2.0),
        _cand("b", 4.0, 2.0),
        _cand("c", 3.2, 0.1),
        _cand("d", 4.8, 7.0),
        _cand("e", 4.0, 2.0),
    ]

    first = rank(candidates)
    second = rank(candidates)

    assert [c.id for c in first] == ["d", "a", "b", "e", "c"]
    assert [c.id for c in first] == [c.id for c in second]


def test_budget_category_maps_to_price_tiers():
    candidates = [_cand(f"t{tier}", 4.0, float(tier), tier=tier) for tier in range(1, 6)]

    assert [c.id for c in rank(candidates, RankFilters(budget_category="budget"))] == ["t1", "t2"]
    assert [c.id for c in rank(candidates, RankFilters(budget_category="mid-range"))] == ["t3"]
    assert [c.id for c in rank(candidates, RankFilters(budget_category="expensive"))] == ["t4", "t5"]
    assert [c.id for c in rank(candidates, RankFilters(budget_category="luxury"))] == ["t4", "t5"]


def test_rating_and_distance_filters():
    candidates = [_cand("low", 2.5, 1.0), _cand("far", 4.5, 30.0), _cand("ok", 4.0, 3.0)]

    ranked = rank(candidates, RankFilters(min_rating=3.0, max_distance_km=10))

    assert [c.id for c in ranked] == ["ok"]


def test_limit_applies_after_sorting():
    candidates = [_cand(f"c{i}", 3.0, 1.0) for i in range(5)] + [_cand("best", 5.0, 20.0)]

    ranked = rank(candidates, limit=2)

    assert [c.id for c in ranked] == ["best", "c0"]


def _option(provider: str, cost: float, available: bool = True) -> TransportOption:
    return TransportOption(provider=provider, type="cab", category=provider, estimated_cost=cost, available=available)


def test_transport_ranking_puts_available_first_then_cheapest():
    ranked = rank_transport([
        _option("pricey", 300),
        _option("cheap-but-unavailable", 50, available=False),
        _option("cheap", 90),
    ])
    assert [o.provider for o in ranked] == ["cheap", "pricey", "cheap-but-unavailable"]


def test_transport_recommendations_follow_distance_bands():
    options = [_option("Local Auto", 40), _option("Ola", 80)]

    short = transport_recommendations(options, RouteInfo(distance_km=1.5, duration_min=8))
    medium = transport_recommendations(options, RouteInfo(distance_km=6, duration_min=20))
    long = transport_recommendations(options, RouteInfo(distance_km=40, duration_min=70))

    assert "auto rickshaw" in short[0]
    assert "Cab services" in medium[0]
    assert "train or bus" in long[0]
    assert short[1] == "Local Auto offers the most economical option"
    assert len(long) == 3
