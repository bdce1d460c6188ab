"""Tests for the stage-weighted combination and the failure fallback."""

from __future__ import annotations

import unittest
from unittest import mock

from startup_valuator import combiner
from startup_valuator.methodologies import METHOD_NAMES, MethodologyContext, ValuationMethodology
from startup_valuator.models import CompanyFacts, MethodEstimate, MethodWeight, ValuationFacts

COMPANY = CompanyFacts(
    company_id="acme-1",
    total_employees=12,
    industry="Software",
    business_activity="SaaS platform",
    stage="Seed",
    last_revenue=500_000,
)
VALUATION = ValuationFacts(
    valuation_id="val-1", last_year_ebitda=0, industry_multiple=8, annual_roi=40
)


class _ExplodingMethodology(ValuationMethodology):
    name = "scorecard"

    def estimate(
        self, company: CompanyFacts, valuation: ValuationFacts, context: MethodologyContext
    ) -> MethodEstimate:
        raise ZeroDivisionError("boom")


class DefaultWeightsTests(unittest.TestCase):
    def test_stage_tables(self) -> None:
        seed = combiner.default_weights("Seed")
        self.assertEqual([seed[n].weight for n in METHOD_NAMES], [30, 30, 20, 10, 10])
        pre_seed = combiner.default_weights(" PRE-SEED ")
        self.assertFalse(pre_seed["dcf_growth"].enabled)
        self.assertFalse(pre_seed["dcf_multiple"].enabled)
        series_a = combiner.default_weights("Series A")
        self.assertEqual(series_a["dcf_growth"].weight, 30)

    def test_unknown_stage_uses_equal_weights(self) -> None:
        weights = combiner.default_weights("Series D")
        self.assertEqual({w.weight for w in weights.values()}, {20})


class CombineTests(unittest.TestCase):
    VALUES = {
        "scorecard": 1_000_000.0,
        "checklist": 2_000_000.0,
        "venture_capital": 3_000_000.0,
        "dcf_growth": 4_000_000.0,
        "dcf_multiple": 5_000_000.0,
    }

    def test_weighted_mean_over_enabled(self) -> None:
        weights = combiner.default_weights("angel")
        # (1M*40 + 2M*40 + 3M*20) / 100
        self.assertAlmostEqual(combiner.combine(self.VALUES, weights), 1_800_000.0)

    def test_scale_invariant(self) -> None:
        weights = combiner.default_weights("seed")
        scaled = {n: MethodWeight(w.weight * 7.5, w.enabled) for n, w in weights.items()}
        self.assertAlmostEqual(
            combiner.combine(self.VALUES, weights), combiner.combine(self.VALUES, scaled)
        )

    def test_disabled_weight_ignored(self) -> None:
        weights = {n: MethodWeight(1.0, enabled=(n == "dcf_multiple")) for n in METHOD_NAMES}
        self.assertAlmostEqual(combiner.combine(self.VALUES, weights), 5_000_000.0)

    def test_no_enabled_weight_is_zero(self) -> None:
        weights = {n: MethodWeight(0.0, enabled=False) for n in METHOD_NAMES}
        self.assertEqual(combiner.combine(self.VALUES, weights), 0.0)


class CalculateValuationTests(unittest.TestCase):
    def test_seed_company(self) -> None:
        result = combiner.calculate_valuation(COMPANY, VALUATION)
        self.assertFalse(result.used_fallback)
        self.assertEqual(result.stage, "seed")
        self.assertAlmostEqual(result.method_values["scorecard"], 2_610_000.0, places=2)
        self.assertAlmostEqual(result.method_values["checklist"], 6_543_750.0, places=2)
        self.assertAlmostEqual(result.method_values["venture_capital"], 5_600_000.0, places=2)
        self.assertAlmostEqual(result.method_values["dcf_multiple"], 3_200_000.0, places=2)

        expected = sum(
            result.normalized_values[n] * result.method_weights[n].weight for n in METHOD_NAMES
        ) / 100
        self.assertAlmostEqual(result.combined_valuation, expected, places=4)
        self.assertTrue(result.derivation_steps[-1].startswith("Weighted combination"))

    def test_missing_stage_treated_as_seed(self) -> None:
        company = CompanyFacts(company_id="x", last_revenue=100_000)
        result = combiner.calculate_valuation(company, VALUATION)
        self.assertEqual(result.stage, "seed")

    def test_custom_weights(self) -> None:
        weights = {n: MethodWeight(1.0, enabled=(n == "venture_capital")) for n in METHOD_NAMES}
        result = combiner.calculate_valuation(COMPANY, VALUATION, weights=weights)
        self.assertAlmostEqual(result.combined_valuation, 5_600_000.0, places=2)

    def test_failure_returns_stage_default(self) -> None:
        with mock.patch.object(combiner, "METHODOLOGIES", (_ExplodingMethodology(),)):
            with self.assertLogs("startup_valuator.combiner", level="ERROR"):
                result = combiner.calculate_valuation(COMPANY, VALUATION)
        self.assertTrue(result.used_fallback)
        self.assertEqual(result.combined_valuation, 2_000_000.0)
        self.assertEqual(result.method_values["scorecard"], 2_400_000.0)
        self.assertEqual(result.method_values["checklist"], 3_000_000.0)
        self.assertEqual(result.method_values["dcf_multiple"], 1_200_000.0)

    def test_fallback_bases_per_stage(self) -> None:
        for stage, base in (("Angel", 1e6), ("Growth", 5e6), ("Series A", 5e6), ("Series B", 2e6)):
            with self.subTest(stage=stage):
                company = CompanyFacts(company_id="x", stage=stage)
                self.assertEqual(combiner.default_valuation_result(company).combined_valuation, base)


class ValuationUpdateTests(unittest.TestCase):
    def test_fixed_investment_share(self) -> None:
        update = combiner.build_valuation_update("val-1", 2_000_000.0, 0.15)
        self.assertEqual(update.pre_money_valuation, 2_000_000.0)
        self.assertAlmostEqual(update.investment, 300_000.0)
        self.assertAlmostEqual(update.post_money_valuation, 2_300_000.0)


if __name__ == "__main__":
    unittest.main()
