"""Checklist valuation: additive factor adjustments to a base valuation."""

from __future__ import annotations

from startup_valuator.models import CompanyFacts, MethodEstimate, ValuationFacts

from .base import MethodologyContext, ValuationMethodology, normalized_stage

BASE_VALUATION = 7_500_000.0
TEAM_SIZE_CAP = 50.0
REVENUE_CAP = 2_000_000.0

STAGE_RATINGS: dict[str, float] = {
    "pre-seed": 0.1,
    "seed": 0.3,
    "growth": 0.7,
    "series a": 0.9,
}
DEFAULT_STAGE_RATING = 0.3


def _adjustment(rating: float, low: float, high: float) -> float:
    """Map a 0..1 rating onto the factor's [low, high] contribution."""
    return low + (high - low) * rating


class ChecklistMethodology(ValuationMethodology):
    name = "checklist"

    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        employees = company.total_employees or 1
        team_rating = min(1.0, max(0.0, employees / TEAM_SIZE_CAP))
        stage = normalized_stage(company)
        stage_rating = STAGE_RATINGS.get(stage, DEFAULT_STAGE_RATING)
        revenue = company.last_revenue or 0.0
        revenue_rating = min(1.0, max(0.0, revenue / REVENUE_CAP))

        team_adj = _adjustment(team_rating, -0.5, 1.0)
        stage_adj = _adjustment(stage_rating, -0.5, 1.0)
        revenue_adj = _adjustment(revenue_rating, -0.25, 1.0)
        total_adjustment = team_adj + stage_adj + revenue_adj
        value = BASE_VALUATION * (1 + total_adjustment)

        return MethodEstimate(
            value=value,
            derivation_steps=(
                f"Team strength ({employees:g} employees): {team_adj:+.3f}.",
                f"Product stage ('{stage}', rating {stage_rating:.1f}): {stage_adj:+.3f}.",
                f"Revenue potential ({revenue:,.2f}): {revenue_adj:+.3f}.",
                f"Apply adjustment: {BASE_VALUATION:,.2f} * (1 + {total_adjustment:.3f}) "
                f"= {value:,.2f} USD.",
            ),
        )
