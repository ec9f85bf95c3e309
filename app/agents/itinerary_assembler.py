"""Aggregate scheduled days into the final itinerary document."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from app.reference import DestinationProfile, ReferenceData
from app.schemas import BudgetPlan, DayPlan, Itinerary, ItineraryMetadata, PlanDiagnostics


class ItineraryAssembler:
    """Pure aggregation: sums day totals and attaches localized text.

    The language has already been validated by the caller, so nothing here
    raises. Day plans are embedded as given.
    """

    def __init__(self, reference: ReferenceData, generated_by: str = "trip-planner"):
        self.reference = reference
        self.generated_by = generated_by

    def assemble(
        self,
        *,
        destination: str,
        profile: DestinationProfile,
        language: str,
        plan: BudgetPlan,
        day_plans: Sequence[DayPlan],
        diagnostics: Optional[PlanDiagnostics] = None,
        generated_at: Optional[datetime] = None,
    ) -> Itinerary:
        templates = self.reference.templates(language)
        total = round(sum(day.total_cost for day in day_plans), 2)

        contacts = dict(self.reference.emergency_contacts)
        if profile.local_police:
            contacts["localPolice"] = profile.local_police

        stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
        return Itinerary(
            metadata=ItineraryMetadata(
                destination=destination,
                resolved_destination=profile.name,
                days=plan.days,
                budget=plan.total_budget,
                language=language,
                generated_by=self.generated_by,
                generated_at=stamp,
            ),
            summary=render_summary(templates.summary, plan.days, profile.name, plan.total_budget),
            day_plans=tuple(day_plans),
            total_estimated_cost=total,
            budget_breakdown=plan.categories,
            tips=tuple(templates.tips),
            emergency_contacts=contacts,
            weather_info=dict(self.reference.weather_info),
            local_info=dict(templates.local_info),
            diagnostics=diagnostics or PlanDiagnostics(),
        )


def render_summary(template: str, days: int, destination: str, budget: float) -> str:
    return template.format(days=days, destination=destination, budget=f"{budget:,.0f}")
