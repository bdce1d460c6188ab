"""Unit tests for the SQLite-backed store."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from startup_valuator.benchmarks import resolve_benchmarks
from startup_valuator.combiner import build_valuation_update
from startup_valuator.exceptions import PersistenceError
from startup_valuator.models import CompanyFacts, ValuationFacts
from startup_valuator.questionnaire import AnswerBag, resolve_inputs
from startup_valuator.scoring import aggregate_scores, evaluate_metrics
from startup_valuator.store import SQLiteStore


def _score(company_id: str = "acme-1"):  # type: ignore[no-untyped-def]
    resolved = resolve_inputs(
        CompanyFacts(company_id=company_id), ValuationFacts(valuation_id="v"), AnswerBag([])
    )
    details = evaluate_metrics(
        resolved.company, resolved.performance, resolved.valuation, resolve_benchmarks()
    )
    return aggregate_scores(company_id, details)


class SQLiteStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.store = SQLiteStore(Path(self._tmpdir.name) / "test.db")

    def tearDown(self) -> None:
        self.store.close()
        self._tmpdir.cleanup()

    # ── scores ──

    def test_save_and_get_score(self) -> None:
        self.store.save_score(_score())
        row = self.store.get_score("acme-1")
        assert row is not None
        self.assertEqual(row["total_score"], 68)
        self.assertEqual(row["finance_score"], 17)
        self.assertIn("calculation_date", row)
        self.assertAlmostEqual(row["details"]["revenue"]["percentage"], 0.924, places=6)

    def test_score_upsert_keeps_one_row(self) -> None:
        first = _score()
        self.store.save_score(first)
        second = _score()
        second.total_score = 90
        self.store.save_score(second)
        row = self.store.get_score("acme-1")
        assert row is not None
        self.assertEqual(row["total_score"], 90)

    def test_missing_score(self) -> None:
        self.assertIsNone(self.store.get_score("nobody"))

    # ── valuations ──

    def test_valuation_update_round_trip(self) -> None:
        self.store.save_valuation_update(build_valuation_update("val-1", 1_000_000.0, 0.15))
        row = self.store.get_valuation_update("val-1")
        assert row is not None
        self.assertEqual(row["pre_money_valuation"], 1_000_000.0)
        self.assertAlmostEqual(row["post_money_valuation"], 1_150_000.0)
        self.assertIsNone(self.store.get_valuation_update("other"))

    # ── benchmarks ──

    def test_benchmarks_replace_and_reset(self) -> None:
        self.assertEqual(self.store.get_benchmarks(), {})
        self.store.save_benchmarks({"avg_revenue": 400_000, "avg_team_size": 20})
        self.store.save_benchmarks({"avg_revenue": 450_000})
        self.assertEqual(self.store.get_benchmarks(), {"avg_revenue": 450_000.0})
        self.store.reset_benchmarks()
        self.assertEqual(self.store.get_benchmarks(), {})

    # ── failures ──

    def test_closed_store_raises_persistence_error(self) -> None:
        self.store.close()
        with self.assertRaises(PersistenceError):
            self.store.save_score(_score())
        with self.assertRaises(PersistenceError):
            self.store.get_benchmarks()


if __name__ == "__main__":
    unittest.main()
