"""Structural interfaces for questionnaire sources, benchmark sources and stores."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from startup_valuator.models import ScoreData, ValuationUpdate
from startup_valuator.questionnaire import QuestionnaireAnswer


@runtime_checkable
class QuestionnaireSource(Protocol):
    """Ordered questionnaire answers for one company."""

    def list_answers(self, company_id: str) -> list[QuestionnaireAnswer]: ...


@runtime_checkable
class IndustryBenchmarkSource(Protocol):
    """Industry-specific benchmark values, keyed like the default table."""

    def get_benchmarks(self, industry: str) -> Mapping[str, float]: ...


@runtime_checkable
class BenchmarkStore(Protocol):
    def get_benchmarks(self) -> dict[str, float]: ...

    def save_benchmarks(self, values: Mapping[str, float]) -> None: ...

    def reset_benchmarks(self) -> None: ...


@runtime_checkable
class ScoreStore(Protocol):
    def save_score(self, score: ScoreData) -> None: ...

    def get_score(self, company_id: str) -> dict[str, Any] | None: ...


@runtime_checkable
class ValuationRecordStore(Protocol):
    def save_valuation_update(self, update: ValuationUpdate) -> None: ...

    def get_valuation_update(self, valuation_id: str) -> dict[str, Any] | None: ...
