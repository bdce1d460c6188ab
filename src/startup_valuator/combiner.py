"""Stage-weighted combination of the valuation methods."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from startup_valuator.config import EngineSettings
from startup_valuator.methodologies import METHOD_NAMES, METHODOLOGIES, MethodologyContext
from startup_valuator.methodologies.base import normalized_stage
from startup_valuator.models import (
    CompanyFacts,
    MethodWeight,
    ValuationFacts,
    ValuationResult,
    ValuationUpdate,
)
from startup_valuator.normalization import normalize_method_values

logger = logging.getLogger("startup_valuator.combiner")


def _table(*weights: float) -> dict[str, MethodWeight]:
    return {
        name: MethodWeight(weight=w, enabled=w > 0) for name, w in zip(METHOD_NAMES, weights)
    }


# Heuristic methods dominate early; cash-flow methods take over as revenue matures.
# Order: scorecard, checklist, venture_capital, dcf_growth, dcf_multiple.
STAGE_WEIGHTS: dict[str, dict[str, MethodWeight]] = {
    "pre-seed": _table(40, 40, 20, 0, 0),
    "angel": _table(40, 40, 20, 0, 0),
    "seed": _table(30, 30, 20, 10, 10),
    "growth": _table(10, 10, 20, 30, 30),
    "series a": _table(10, 10, 20, 30, 30),
}
EQUAL_WEIGHTS = _table(20, 20, 20, 20, 20)

# Fallback estimates per stage when calculation fails.
FALLBACK_BASE_VALUES: dict[str, float] = {
    "pre-seed": 1_000_000.0,
    "angel": 1_000_000.0,
    "growth": 5_000_000.0,
    "series a": 5_000_000.0,
}
DEFAULT_FALLBACK_BASE = 2_000_000.0
FALLBACK_FACTORS: dict[str, float] = {
    "scorecard": 1.2,
    "checklist": 1.5,
    "venture_capital": 0.8,
    "dcf_growth": 0.7,
    "dcf_multiple": 0.6,
}


def default_weights(stage: str) -> dict[str, MethodWeight]:
    return dict(STAGE_WEIGHTS.get(stage.strip().lower(), EQUAL_WEIGHTS))


def combine(values: Mapping[str, float], weights: Mapping[str, MethodWeight]) -> float:
    """Weighted mean over enabled methods; 0 when no enabled weight remains."""
    enabled = {
        name: w.weight for name, w in weights.items() if w.enabled and name in values
    }
    total_weight = sum(enabled.values())
    if total_weight <= 0:
        return 0.0
    return sum(values[name] * weight for name, weight in enabled.items()) / total_weight


def default_valuation_result(company: CompanyFacts) -> ValuationResult:
    stage = normalized_stage(company)
    base = FALLBACK_BASE_VALUES.get(stage, DEFAULT_FALLBACK_BASE)
    values = {name: base * FALLBACK_FACTORS[name] for name in METHOD_NAMES}
    return ValuationResult(
        company_id=company.company_id,
        stage=stage,
        method_values=values,
        normalized_values=dict(values),
        method_weights=default_weights(stage),
        combined_valuation=base,
        derivation_steps=[f"Calculation failed; using the '{stage}' stage default of {base:,.2f} USD."],
        used_fallback=True,
    )


def calculate_valuation(
    company: CompanyFacts,
    valuation: ValuationFacts,
    settings: EngineSettings | None = None,
    weights: Mapping[str, MethodWeight] | None = None,
) -> ValuationResult:
    """Run every methodology and blend the results.

    Never raises for failures inside the calculation; a deterministic
    stage-scaled default is returned instead so the caller always has a value
    to persist.
    """
    settings = settings or EngineSettings()
    stage = normalized_stage(company)
    try:
        context = MethodologyContext(dcf=settings.dcf)
        method_weights = dict(weights) if weights is not None else default_weights(stage)
        values: dict[str, float] = {}
        steps: list[str] = [f"Company stage '{stage}' selects the method weight table."]
        for methodology in METHODOLOGIES:
            estimate = methodology.valuate(company, valuation, context)
            values[methodology.name] = estimate.value
            steps.extend(f"[{methodology.name}] {s}" for s in estimate.derivation_steps)

        report = normalize_method_values(values, settings.normalization)
        combined = combine(report.values, method_weights)
        if report.applied:
            steps.append(
                f"Estimates spread {report.spread:,.1f}x; clamped around median "
                f"{report.median:,.2f} (geometric mean {report.geometric_mean:,.2f})."
            )
        steps.append(f"Weighted combination over enabled methods: {combined:,.2f} USD.")
    except Exception:
        logger.exception(
            "valuation_failed company=%s stage=%s; using stage default", company.company_id, stage
        )
        return default_valuation_result(company)

    return ValuationResult(
        company_id=company.company_id,
        stage=stage,
        method_values=values,
        normalized_values=report.values,
        method_weights=method_weights,
        combined_valuation=combined,
        derivation_steps=steps,
        normalization_applied=report.applied,
    )


def build_valuation_update(
    valuation_id: str,
    selected_valuation: float,
    investment_pct: float,
) -> ValuationUpdate:
    """Selected value becomes pre-money; investment is a fixed share of it."""
    investment = selected_valuation * investment_pct
    return ValuationUpdate(
        valuation_id=valuation_id,
        selected_valuation=selected_valuation,
        pre_money_valuation=selected_valuation,
        investment=investment,
        post_money_valuation=selected_valuation + investment,
    )
