"""Split a trip budget into category and per-day views."""
from __future__ import annotations

import math
from typing import Any

from app.errors import InvalidBudget
from app.logs import get_logger
from app.schemas import BudgetPlan, CategoryBudget, CategoryShares

logger = get_logger(__name__)

MIN_BUDGET = 1000
MAX_DAYS = 30


def allocate(
    total_budget: Any,
    days: Any,
    shares: CategoryShares | None = None,
    *,
    min_budget: float = MIN_BUDGET,
    max_days: int = MAX_DAYS,
) -> BudgetPlan:
    """Return the floored category split plus the real-valued daily budget.

    Each category is floored to a whole currency unit, so the five values can
    sum to slightly less than ``total_budget``; that residual is reported on
    the plan and never reallocated. ``daily_budget`` is ``total / days`` and
    is not reconciled with the category floors.
    """
    total = _validate_total(total_budget, min_budget)
    n_days = _validate_days(days, max_days)
    shares = shares or CategoryShares()

    categories = CategoryBudget(
        accommodation=_floor_share(total, shares.accommodation),
        food=_floor_share(total, shares.food),
        transport=_floor_share(total, shares.transport),
        activities=_floor_share(total, shares.activities),
        miscellaneous=_floor_share(total, shares.miscellaneous),
    )
    residual = total - categories.total()
    plan = BudgetPlan(
        total_budget=total,
        days=n_days,
        categories=categories,
        daily_budget=total / n_days,
        residual=residual,
    )
    logger.debug(
        "Allocated %.2f over %d day(s): %s (residual %.2f, daily %.2f)",
        total,
        n_days,
        categories.model_dump(),
        residual,
        plan.daily_budget,
    )
    return plan


def _floor_share(total: float, percent: int) -> int:
    # integer percentages keep 10000 * 35 / 100 exact
    return math.floor(total * percent / 100)


def _validate_total(total_budget: Any, min_budget: float) -> float:
    if isinstance(total_budget, bool):
        raise InvalidBudget("Budget must be a number")
    try:
        total = float(total_budget)
    except (TypeError, ValueError) as exc:
        raise InvalidBudget("Budget must be a number") from exc
    if math.isnan(total) or math.isinf(total):
        raise InvalidBudget("Budget must be a finite number")
    if total < min_budget:
        raise InvalidBudget(f"Budget must be at least {min_budget:g}")
    return total


def _validate_days(days: Any, max_days: int) -> int:
    if isinstance(days, bool):
        raise InvalidBudget("Days must be an integer")
    if isinstance(days, float) and days.is_integer():
        days = int(days)
    if not isinstance(days, int):
        raise InvalidBudget("Days must be an integer")
    if not 1 <= days <= max_days:
        raise InvalidBudget(f"Days must be between 1-{max_days}")
    return days
