"""Valuation and scoring engine orchestration."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from startup_valuator import combiner
from startup_valuator.benchmarks import BenchmarkTable, resolve_benchmarks
from startup_valuator.config import EngineSettings
from startup_valuator.exceptions import (
    MissingPrerequisiteDataError,
    PersistenceError,
    ValidationError,
)
from startup_valuator.interfaces import (
    BenchmarkStore,
    IndustryBenchmarkSource,
    ScoreStore,
    ValuationRecordStore,
)
from startup_valuator.methodologies import METHOD_NAMES
from startup_valuator.models import (
    CompanyFacts,
    MethodWeight,
    ScoreData,
    ValuationFacts,
    ValuationResult,
)
from startup_valuator.questionnaire import AnswerBag, resolve_inputs
from startup_valuator.scoring import aggregate_scores, evaluate_metrics
from startup_valuator.validation import optional_number

logger = logging.getLogger("startup_valuator.engine")

ACTIONS = ("valuation", "score", "all")


@dataclass
class EngineRun:
    valuation: ValuationResult | None = None
    score: ScoreData | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.valuation is not None:
            out["valuation"] = self.valuation.to_dict()
        if self.score is not None:
            out["score"] = self.score.to_dict()
        return out


def _require_context(
    company: CompanyFacts | None, valuation: ValuationFacts | None
) -> tuple[CompanyFacts, ValuationFacts]:
    if company is None:
        raise MissingPrerequisiteDataError("Company data is required for this calculation.")
    if valuation is None:
        raise MissingPrerequisiteDataError("Valuation data is required for this calculation.")
    return company, valuation


def parse_weights(payload: Mapping[str, Any]) -> dict[str, MethodWeight]:
    unknown = sorted(set(payload) - set(METHOD_NAMES))
    if unknown:
        available = ", ".join(METHOD_NAMES)
        raise ValidationError(
            f"Unknown methodology '{unknown[0]}' in weights. Available: {available}."
        )
    weights: dict[str, MethodWeight] = {}
    for name in METHOD_NAMES:
        config = payload.get(name)
        if config is None:
            weights[name] = MethodWeight(weight=0.0, enabled=False)
        elif isinstance(config, dict):
            weights[name] = MethodWeight.from_dict(config, name)
        else:
            raise ValidationError(f"Weight config for '{name}' must be an object.")
    return weights


class StartupEngine:
    """Stateless facade over benchmark resolution, valuation and scoring.

    Stores are optional collaborators; without them the engine only computes.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        score_store: ScoreStore | None = None,
        valuation_store: ValuationRecordStore | None = None,
        benchmark_store: BenchmarkStore | None = None,
        industry_source: IndustryBenchmarkSource | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.score_store = score_store
        self.valuation_store = valuation_store
        self.benchmark_store = benchmark_store
        self.industry_source = industry_source

    # ── benchmarks ──

    def resolve_benchmarks(
        self,
        industry: str | None = None,
        user_overrides: Mapping[str, Any] | None = None,
    ) -> BenchmarkTable:
        """Build a fresh table; call again after any benchmark edit."""
        if user_overrides is None and self.benchmark_store is not None:
            try:
                user_overrides = self.benchmark_store.get_benchmarks()
            except PersistenceError as exc:
                logger.error("benchmark_read_failed error=%s; using defaults", exc)
                user_overrides = None
        industry_values: Mapping[str, Any] | None = None
        if industry and self.industry_source is not None:
            industry_values = self.industry_source.get_benchmarks(industry)
        return resolve_benchmarks(user_overrides, industry_values)

    # ── valuation ──

    def calculate_valuation(
        self,
        company: CompanyFacts | None,
        valuation: ValuationFacts | None,
        *,
        weights: Mapping[str, MethodWeight] | None = None,
        selected_override: float | None = None,
        settings: EngineSettings | None = None,
        persist: bool = True,
    ) -> ValuationResult:
        company, valuation = _require_context(company, valuation)
        settings = settings or self.settings
        start = time.monotonic()

        result = combiner.calculate_valuation(company, valuation, settings, weights)
        selected = selected_override if selected_override is not None else result.combined_valuation
        result.valuation_update = combiner.build_valuation_update(
            valuation.valuation_id, selected, settings.investment_pct
        )
        if persist and self.valuation_store is not None:
            try:
                self.valuation_store.save_valuation_update(result.valuation_update)
            except Exception as exc:
                logger.exception(
                    "valuation_save_failed valuation_id=%s error=%s", valuation.valuation_id, exc
                )
                result.persistence_error = str(exc)

        logger.info(
            "valuation_ok company=%s stage=%s combined=%.2f fallback=%s request_id=%s "
            "elapsed_ms=%.1f",
            company.company_id,
            result.stage,
            result.combined_valuation,
            result.used_fallback,
            result.request_id,
            (time.monotonic() - start) * 1000,
        )
        return result

    # ── scoring ──

    def calculate_score(
        self,
        company: CompanyFacts | None,
        valuation: ValuationFacts | None,
        answers: AnswerBag,
        *,
        benchmarks: BenchmarkTable | None = None,
        settings: EngineSettings | None = None,
        persist: bool = True,
    ) -> ScoreData:
        company, valuation = _require_context(company, valuation)
        settings = settings or self.settings
        start = time.monotonic()

        if benchmarks is None:
            benchmarks = self.resolve_benchmarks(company.industry)
        resolved = resolve_inputs(company, valuation, answers, settings.resolver_defaults)
        details = evaluate_metrics(
            resolved.company, resolved.performance, resolved.valuation, benchmarks
        )
        score = aggregate_scores(company.company_id, details)
        score.inputs_used = resolved.inputs_used()
        score.benchmark_sources = dict(benchmarks.sources)

        if persist and self.score_store is not None:
            try:
                self.score_store.save_score(score)
            except Exception as exc:
                logger.exception("score_save_failed company=%s error=%s", company.company_id, exc)
                score.persistence_error = str(exc)

        logger.info(
            "score_ok company=%s total=%d request_id=%s elapsed_ms=%.1f",
            company.company_id,
            score.total_score,
            score.request_id,
            (time.monotonic() - start) * 1000,
        )
        return score

    # ── request payloads ──

    def evaluate_from_dict(self, payload: dict[str, Any], *, persist: bool = True) -> EngineRun:
        action = payload.get("action", "all")
        if action not in ACTIONS:
            raise ValidationError(
                f"Unknown action '{action}'. Available: {', '.join(ACTIONS)}."
            )
        company_payload = payload.get("company")
        valuation_payload = payload.get("valuation")
        if not isinstance(company_payload, dict):
            raise MissingPrerequisiteDataError("Request needs a 'company' object.")
        if not isinstance(valuation_payload, dict):
            raise MissingPrerequisiteDataError("Request needs a 'valuation' object.")
        company = CompanyFacts.from_dict(company_payload)
        valuation = ValuationFacts.from_dict(valuation_payload)

        settings = self.settings
        if isinstance(payload.get("settings"), dict):
            settings = EngineSettings.from_dict(payload["settings"])

        run = EngineRun()
        if action in ("valuation", "all"):
            weights = None
            if isinstance(payload.get("methodology_weights"), dict):
                weights = parse_weights(payload["methodology_weights"])
            selected = optional_number(payload, "selected_valuation")
            run.valuation = self.calculate_valuation(
                company,
                valuation,
                weights=weights,
                selected_override=selected,
                settings=settings,
                persist=persist,
            )
        if action in ("score", "all"):
            answers = AnswerBag.from_payload(payload.get("questionnaire"))
            benchmarks = None
            if isinstance(payload.get("benchmarks"), dict):
                benchmarks = self.resolve_benchmarks(company.industry, payload["benchmarks"])
            run.score = self.calculate_score(
                company,
                valuation,
                answers,
                benchmarks=benchmarks,
                settings=settings,
                persist=persist,
            )
        return run
