"""Venture capital method: projected revenue times a growth-tiered multiple."""

from __future__ import annotations

from startup_valuator.models import CompanyFacts, MethodEstimate, ValuationFacts

from .base import MethodologyContext, ValuationMethodology

# (minimum growth %, revenue multiple), checked top-down.
REVENUE_MULTIPLE_TIERS: tuple[tuple[float, float], ...] = (
    (100.0, 15.0),
    (50.0, 10.0),
    (30.0, 8.0),
    (20.0, 6.0),
    (10.0, 4.0),
)
FLOOR_MULTIPLE = 2.0


def revenue_multiple(growth_rate_pct: float) -> float:
    for threshold, multiple in REVENUE_MULTIPLE_TIERS:
        if growth_rate_pct >= threshold:
            return multiple
    return FLOOR_MULTIPLE


class VentureCapitalMethodology(ValuationMethodology):
    name = "venture_capital"

    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        revenue = company.last_revenue or 0.0
        growth = valuation.annual_roi or 0.0
        multiple = revenue_multiple(growth)
        projected = revenue * (1 + growth / 100)
        value = projected * multiple
        return MethodEstimate(
            value=value,
            derivation_steps=(
                f"Project revenue: {revenue:,.2f} * (1 + {growth:g}%) = {projected:,.2f} USD.",
                f"Select revenue multiple for {growth:g}% growth: {multiple:g}x.",
                f"Apply multiple: {projected:,.2f} * {multiple:g} = {value:,.2f} USD.",
            ),
        )
