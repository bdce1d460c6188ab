"""Typed models for company facts, valuation results and scores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any
from uuid import uuid4

from startup_valuator import __version__
from startup_valuator.exceptions import ValidationError
from startup_valuator.validation import optional_number, optional_text, require_field


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going toward +inf, so -2.5 -> -2."""
    shifted = Decimal(str(value)) + Decimal("0.5")
    return int(shifted.to_integral_value(rounding=ROUND_FLOOR))


def _money(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CompanyFacts:
    company_id: str
    name: str = ""
    total_employees: float | None = None
    founded_year: int | None = None
    industry: str | None = None
    business_activity: str | None = None
    stage: str | None = None
    last_revenue: float | None = None

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> CompanyFacts:
        company_id = require_field(payload, "id", (str, int))
        founded = optional_number(payload, "founded_year")
        return CompanyFacts(
            company_id=str(company_id),
            name=optional_text(payload, "name") or "",
            total_employees=optional_number(payload, "total_employees"),
            founded_year=int(founded) if founded is not None else None,
            industry=optional_text(payload, "industry"),
            business_activity=optional_text(payload, "business_activity"),
            stage=optional_text(payload, "stage"),
            last_revenue=optional_number(payload, "last_revenue"),
        )


@dataclass(frozen=True)
class ValuationUpdate:
    """Write-back record for the valuation store."""

    valuation_id: str
    selected_valuation: float
    pre_money_valuation: float
    investment: float
    post_money_valuation: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "valuation_id": self.valuation_id,
            "selected_valuation": _money(self.selected_valuation),
            "pre_money_valuation": _money(self.pre_money_valuation),
            "investment": _money(self.investment),
            "post_money_valuation": _money(self.post_money_valuation),
        }


@dataclass(frozen=True)
class ValuationFacts:
    valuation_id: str
    pre_money_valuation: float | None = None
    selected_valuation: float | None = None
    investment: float | None = None
    post_money_valuation: float | None = None
    last_year_ebitda: float | None = None
    industry_multiple: float | None = None
    # Also read as the required growth rate, in percent.
    annual_roi: float | None = None

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> ValuationFacts:
        valuation_id = require_field(payload, "id", (str, int))
        return ValuationFacts(
            valuation_id=str(valuation_id),
            pre_money_valuation=optional_number(payload, "pre_money_valuation"),
            selected_valuation=optional_number(payload, "selected_valuation"),
            investment=optional_number(payload, "investment"),
            post_money_valuation=optional_number(payload, "post_money_valuation"),
            last_year_ebitda=optional_number(payload, "last_year_ebitda"),
            industry_multiple=optional_number(payload, "industry_multiple"),
            annual_roi=optional_number(payload, "annual_roi"),
        )


@dataclass(frozen=True)
class PerformanceFacts:
    revenue: float | None = None
    gross_margin: float | None = None
    cash_on_hand: float | None = None
    customers: float | None = None
    market_size: float | None = None
    product_readiness: float | None = None
    growth_rate: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "revenue": self.revenue,
            "gross_margin": self.gross_margin,
            "cash_on_hand": self.cash_on_hand,
            "customers": self.customers,
            "market_size": self.market_size,
            "product_readiness": self.product_readiness,
            "growth_rate": self.growth_rate,
        }


@dataclass(frozen=True)
class MethodWeight:
    weight: float
    enabled: bool = True

    @staticmethod
    def from_dict(payload: dict[str, Any], method: str) -> MethodWeight:
        weight = optional_number(payload, "weight")
        if weight is None:
            raise ValidationError(f"Missing required field: 'methodology_weights.{method}.weight'.")
        if weight < 0:
            raise ValidationError(f"Weight for '{method}' must be non-negative.")
        enabled = payload.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValidationError(f"Field 'methodology_weights.{method}.enabled' must be bool.")
        return MethodWeight(weight=weight, enabled=enabled)

    def to_dict(self) -> dict[str, Any]:
        return {"weight": self.weight, "enabled": self.enabled}


@dataclass(frozen=True)
class MethodEstimate:
    """One methodology's raw estimate plus how it was reached."""

    value: float
    derivation_steps: tuple[str, ...] = ()


@dataclass
class ValuationResult:
    company_id: str
    stage: str
    method_values: dict[str, float]
    normalized_values: dict[str, float]
    method_weights: dict[str, MethodWeight]
    combined_valuation: float
    derivation_steps: list[str] = field(default_factory=list)
    normalization_applied: bool = False
    used_fallback: bool = False
    valuation_update: ValuationUpdate | None = None
    persistence_error: str | None = None
    request_id: str = field(default_factory=lambda: str(uuid4()))
    generated_at_utc: str = field(default_factory=_utc_now)
    engine_version: str = field(default_factory=lambda: __version__)

    def to_dict(self) -> dict[str, Any]:
        valuation_result: dict[str, Any] = {
            "company_id": self.company_id,
            "stage": self.stage,
            "method_values": {k: _money(v) for k, v in self.method_values.items()},
            "normalized_values": {k: _money(v) for k, v in self.normalized_values.items()},
            "methodology_weights": {k: w.to_dict() for k, w in self.method_weights.items()},
            "combined_valuation": _money(self.combined_valuation),
            "derivation_steps": self.derivation_steps,
            "normalization_applied": self.normalization_applied,
            "used_fallback": self.used_fallback,
        }
        if self.valuation_update is not None:
            valuation_result["valuation_update"] = self.valuation_update.to_dict()
        return {
            "valuation_result": valuation_result,
            "audit_metadata": self._audit_metadata(),
        }

    def _audit_metadata(self) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "request_id": self.request_id,
            "generated_at_utc": self.generated_at_utc,
            "engine_version": self.engine_version,
        }
        if self.persistence_error:
            meta["persistence_error"] = self.persistence_error
        return meta


@dataclass(frozen=True)
class ScoreMetricDetail:
    score: float
    benchmark: float
    value: float
    percentage: float
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "benchmark": self.benchmark,
            "value": self.value,
            "percentage": self.percentage,
            "weight": self.weight,
        }


@dataclass
class ScoreData:
    company_id: str
    total_score: int
    finance_score: int
    team_score: int
    growth_score: int
    market_score: int
    product_score: int
    details: dict[str, ScoreMetricDetail]
    inputs_used: dict[str, Any] = field(default_factory=dict)
    benchmark_sources: dict[str, str] = field(default_factory=dict)
    persistence_error: str | None = None
    request_id: str = field(default_factory=lambda: str(uuid4()))
    generated_at_utc: str = field(default_factory=_utc_now)
    engine_version: str = field(default_factory=lambda: __version__)

    def category_scores(self) -> dict[str, int]:
        return {
            "finance": self.finance_score,
            "team": self.team_score,
            "growth": self.growth_score,
            "market": self.market_score,
            "product": self.product_score,
        }

    def to_dict(self) -> dict[str, Any]:
        score_result: dict[str, Any] = {
            "company_id": self.company_id,
            "total_score": self.total_score,
            "category_scores": self.category_scores(),
            "details": {k: d.to_dict() for k, d in self.details.items()},
            "inputs_used": self.inputs_used,
            "benchmark_sources": self.benchmark_sources,
        }
        meta: dict[str, Any] = {
            "request_id": self.request_id,
            "generated_at_utc": self.generated_at_utc,
            "engine_version": self.engine_version,
        }
        if self.persistence_error:
            meta["persistence_error"] = self.persistence_error
        return {"score_result": score_result, "audit_metadata": meta}
