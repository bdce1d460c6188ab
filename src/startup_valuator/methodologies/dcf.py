"""Discounted cash-flow methods: growth projection and EBITDA multiple."""

from __future__ import annotations

from startup_valuator.models import CompanyFacts, MethodEstimate, ValuationFacts

from .base import MethodologyContext, ValuationMethodology


class DCFGrowthMethodology(ValuationMethodology):
    name = "dcf_growth"

    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        dcf = context.dcf
        revenue = company.last_revenue or 0.0
        growth_pct = valuation.annual_roi or dcf.default_growth_pct

        margin_pct = dcf.default_margin_pct
        if valuation.last_year_ebitda and revenue > 0:
            margin_pct = valuation.last_year_ebitda / revenue * 100
        margin_pct = max(margin_pct, dcf.margin_floor_pct)
        margin = margin_pct / 100

        present_value = 0.0
        current_revenue = revenue
        for year in range(1, dcf.projection_years + 1):
            current_revenue *= 1 + growth_pct / 100
            present_value += current_revenue * margin / (1 + dcf.discount_rate) ** year

        terminal_cash_flow = current_revenue * margin * (1 + dcf.perpetual_growth)
        terminal_value = terminal_cash_flow * dcf.terminal_multiple
        discounted_terminal = terminal_value / (1 + dcf.discount_rate) ** dcf.projection_years
        value = present_value + discounted_terminal

        return MethodEstimate(
            value=value,
            derivation_steps=(
                f"Grow revenue {revenue:,.2f} at {growth_pct:g}% for "
                f"{dcf.projection_years} years with a {margin_pct:.1f}% margin.",
                f"Discount yearly cash flows at {dcf.discount_rate:.0%}: {present_value:,.2f} USD.",
                f"Terminal value: {terminal_cash_flow:,.2f} * {dcf.terminal_multiple:g} "
                f"discounted = {discounted_terminal:,.2f} USD.",
                f"Sum: {present_value:,.2f} + {discounted_terminal:,.2f} = {value:,.2f} USD.",
            ),
        )


class DCFMultipleMethodology(ValuationMethodology):
    name = "dcf_multiple"

    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        dcf = context.dcf
        revenue = company.last_revenue or 0.0
        ebitda = valuation.last_year_ebitda or 0.0
        multiple = valuation.industry_multiple or dcf.default_industry_multiple

        if ebitda > 0:
            value = ebitda * multiple
            step = f"Apply industry multiple to EBITDA: {ebitda:,.2f} * {multiple:g} = {value:,.2f} USD."
        elif revenue > 0:
            fallback_multiple = multiple * dcf.revenue_multiple_discount
            value = revenue * fallback_multiple
            step = (
                f"No positive EBITDA; apply {fallback_multiple:g}x to revenue: "
                f"{revenue:,.2f} * {fallback_multiple:g} = {value:,.2f} USD."
            )
        else:
            value = 0.0
            step = "No positive EBITDA or revenue; estimate is 0."
        return MethodEstimate(value=value, derivation_steps=(step,))
