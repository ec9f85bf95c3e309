"""Error kinds raised by the planner.

Validation errors surface to the caller before any scheduling work starts.
``ProviderUnavailable`` travels inside a ``ProviderResult`` instead of being
raised, and ``NoCandidatesAvailable`` is recovered inside the scheduler.
"""
from __future__ import annotations


class PlannerError(Exception):
    """Base class for every planner failure."""

    kind = "planner_error"


class InvalidCoordinate(PlannerError):
    kind = "invalid_coordinate"


class InvalidBudget(PlannerError):
    kind = "invalid_budget"


class UnsupportedLanguage(PlannerError):
    kind = "unsupported_language"


class ProviderUnavailable(PlannerError):
    kind = "provider_unavailable"

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source} unavailable: {reason}")
        self.source = source
        self.reason = reason


class NoCandidatesAvailable(PlannerError):
    kind = "no_candidates_available"


class InvalidStartDate(PlannerError):
    kind = "invalid_start_date"
