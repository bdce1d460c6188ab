"""Scorecard valuation: weighted rating applied to a base valuation."""

from __future__ import annotations

from startup_valuator.models import CompanyFacts, MethodEstimate, ValuationFacts

from .base import MethodologyContext, ValuationMethodology

BASE_VALUATION = 5_000_000.0
TEAM_SIZE_CAP = 50.0
REVENUE_CAP = 1_000_000.0
TECH_MARKET_SCORE = 0.7
OTHER_MARKET_SCORE = 0.4

TEAM_WEIGHT = 0.3
MARKET_PRODUCT_WEIGHT = 0.3
FINANCIAL_WEIGHT = 0.4


def _unit(value: float) -> float:
    return min(1.0, max(0.0, value))


class ScorecardMethodology(ValuationMethodology):
    name = "scorecard"

    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        employees = company.total_employees or 1
        team_score = _unit(employees / TEAM_SIZE_CAP)

        industry = (company.industry or "").lower()
        activity = (company.business_activity or "").lower()
        is_tech = "tech" in industry or "saas" in activity
        market_product_score = TECH_MARKET_SCORE if is_tech else OTHER_MARKET_SCORE

        roi = valuation.annual_roi or 0.0
        revenue = company.last_revenue or 0.0
        financial_score = _unit((roi + 100) / 200) * 0.5 + _unit(revenue / REVENUE_CAP) * 0.5

        rating = (
            team_score * TEAM_WEIGHT
            + market_product_score * MARKET_PRODUCT_WEIGHT
            + financial_score * FINANCIAL_WEIGHT
        )
        value = BASE_VALUATION * rating
        return MethodEstimate(
            value=value,
            derivation_steps=(
                f"Team score: min(1, {employees:g} / {TEAM_SIZE_CAP:g}) = {team_score:.3f}.",
                f"Market/product score ({'tech' if is_tech else 'non-tech'}): "
                f"{market_product_score:.1f}.",
                f"Financial score from ROI {roi:g}% and revenue {revenue:,.2f}: "
                f"{financial_score:.3f}.",
                f"Weighted rating: {team_score:.3f}*{TEAM_WEIGHT} + "
                f"{market_product_score:.1f}*{MARKET_PRODUCT_WEIGHT} + "
                f"{financial_score:.3f}*{FINANCIAL_WEIGHT} = {rating:.3f}.",
                f"Apply rating to base valuation: {BASE_VALUATION:,.2f} * {rating:.3f} "
                f"= {value:,.2f} USD.",
            ),
        )
