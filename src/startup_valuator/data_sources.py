"""Mock data source adapters for questionnaires and industry benchmarks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from startup_valuator.questionnaire import QuestionnaireAnswer


class MockIndustryBenchmarkSource:
    """In-memory industry benchmark sets with case-insensitive lookup."""

    _BENCHMARKS: dict[str, dict[str, float]] = {
        "software": {
            "avg_revenue": 500_000.0,
            "avg_gross_margin": 75.0,
            "avg_growth_rate": 40.0,
            "avg_valuation": 3_000_000.0,
        },
        "fintech": {
            "avg_revenue": 450_000.0,
            "avg_gross_margin": 60.0,
            "avg_cash_on_hand": 250_000.0,
            "avg_valuation": 2_500_000.0,
        },
        "healthcare": {
            "avg_revenue": 300_000.0,
            "avg_gross_margin": 55.0,
            "avg_team_size": 20.0,
            "avg_market_size": 10_000_000.0,
        },
        "business support services": {
            "avg_revenue": 250_000.0,
            "avg_gross_margin": 45.0,
            "avg_growth_rate": 15.0,
        },
    }

    def get_benchmarks(self, industry: str) -> Mapping[str, float]:
        values = self._BENCHMARKS.get(industry.strip().lower(), {})
        return MappingProxyType(values)


class StaticQuestionnaireSource:
    """Questionnaire answers held in memory, keyed by company id."""

    def __init__(self, answers: Mapping[str, Iterable[QuestionnaireAnswer]] | None = None) -> None:
        self._answers: dict[str, list[QuestionnaireAnswer]] = {
            company_id: list(rows) for company_id, rows in (answers or {}).items()
        }

    def list_answers(self, company_id: str) -> list[QuestionnaireAnswer]:
        rows = self._answers.get(company_id, [])
        return sorted(rows, key=lambda row: _question_order(row.question_key))


def _question_order(key: str) -> tuple[int, ...]:
    parts = []
    for part in key.split("."):
        parts.append(int(part) if part.isdigit() else 0)
    return tuple(parts)
