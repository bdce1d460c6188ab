"""Tests for benchmark layering."""

from __future__ import annotations

import unittest

from startup_valuator.benchmarks import (
    DEFAULT_BENCHMARKS,
    SOURCE_DEFAULT,
    SOURCE_INDUSTRY,
    SOURCE_USER,
    resolve_benchmarks,
)
from startup_valuator.data_sources import MockIndustryBenchmarkSource


class ResolveBenchmarksTests(unittest.TestCase):
    def test_defaults_only(self) -> None:
        table = resolve_benchmarks()
        self.assertEqual(table.to_dict(), DEFAULT_BENCHMARKS)
        self.assertTrue(all(table.source_of(k) == SOURCE_DEFAULT for k in DEFAULT_BENCHMARKS))

    def test_user_overrides_default(self) -> None:
        table = resolve_benchmarks({"avg_revenue": 400_000})
        self.assertEqual(table.get("avg_revenue"), 400_000.0)
        self.assertEqual(table.source_of("avg_revenue"), SOURCE_USER)
        self.assertEqual(table.get("avg_gross_margin"), 65.0)

    def test_industry_fills_keys_user_did_not_override(self) -> None:
        table = resolve_benchmarks(
            {"avg_revenue": 400_000},
            {"avg_revenue": 500_000, "avg_gross_margin": 75},
        )
        self.assertEqual(table.get("avg_revenue"), 400_000.0)
        self.assertEqual(table.source_of("avg_revenue"), SOURCE_USER)
        self.assertEqual(table.get("avg_gross_margin"), 75.0)
        self.assertEqual(table.source_of("avg_gross_margin"), SOURCE_INDUSTRY)

    def test_table_is_always_complete(self) -> None:
        table = resolve_benchmarks({"avg_revenue": 1}, {"avg_team_size": 20})
        self.assertEqual(set(table.to_dict()), set(DEFAULT_BENCHMARKS))

    def test_unusable_values_ignored(self) -> None:
        table = resolve_benchmarks(
            {
                "avg_revenue": 0,
                "avg_team_size": -4,
                "avg_valuation": "lots",
                "avg_growth_rate": True,
                "avg_cash_on_hand": float("nan"),
                "not_a_metric": 10,
            }
        )
        self.assertEqual(table.to_dict(), DEFAULT_BENCHMARKS)

    def test_mock_industry_source_lookup(self) -> None:
        source = MockIndustryBenchmarkSource()
        self.assertEqual(source.get_benchmarks("  SOFTWARE ")["avg_revenue"], 500_000.0)
        self.assertEqual(dict(source.get_benchmarks("shipbuilding")), {})


if __name__ == "__main__":
    unittest.main()
