"""Nine-metric startup health score.

Each metric is compared against its benchmark as a percentage and mapped to a
score.  Missing inputs never raise: they are scored against a fallback value.

Category scores renormalize their metric weights within the category.  The
total score is the flat weighted sum of all nine metrics, not a mean of the
category scores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from startup_valuator.benchmarks import BenchmarkTable
from startup_valuator.models import (
    CompanyFacts,
    PerformanceFacts,
    ScoreData,
    ScoreMetricDetail,
    ValuationFacts,
    round_half_up,
)

logger = logging.getLogger("startup_valuator.scoring")

METRIC_WEIGHTS: dict[str, float] = {
    "revenue": 0.10,
    "gross_margin": 0.10,
    "cash_on_hand": 0.05,
    "valuation": 0.05,
    "team_size": 0.15,
    "growth_rate": 0.15,
    "annual_roi": 0.10,
    "market_size": 0.15,
    "product_readiness": 0.15,
}

CATEGORY_METRICS: dict[str, tuple[str, ...]] = {
    "finance": ("revenue", "gross_margin", "cash_on_hand", "valuation"),
    "team": ("team_size",),
    "growth": ("growth_rate", "annual_roi"),
    "market": ("market_size",),
    "product": ("product_readiness",),
}

# Currency ratios stop counting above 150% of benchmark.
CURRENCY_RATIO_CAP = 1.5
MAX_SCORE = 100.0
MIN_GROWTH_SCORE = -100.0

FALLBACK_MARKET_SIZE = 4_000_000.0
FALLBACK_PRODUCT_READINESS = 75.0


@dataclass(frozen=True)
class MetricSpec:
    benchmark_key: str
    capped: bool


METRIC_SPECS: dict[str, MetricSpec] = {
    "revenue": MetricSpec("avg_revenue", capped=True),
    "gross_margin": MetricSpec("avg_gross_margin", capped=False),
    "cash_on_hand": MetricSpec("avg_cash_on_hand", capped=True),
    "valuation": MetricSpec("avg_valuation", capped=True),
    "team_size": MetricSpec("avg_team_size", capped=False),
    "growth_rate": MetricSpec("avg_growth_rate", capped=False),
    "annual_roi": MetricSpec("avg_annual_roi", capped=False),
    "market_size": MetricSpec("avg_market_size", capped=True),
    "product_readiness": MetricSpec("product_readiness", capped=False),
}


def _ratio_metric(metric: str, value: float, benchmarks: BenchmarkTable) -> ScoreMetricDetail:
    spec = METRIC_SPECS[metric]
    benchmark = benchmarks.get(spec.benchmark_key)
    ratio = value / benchmark
    if spec.capped:
        ratio = min(ratio, CURRENCY_RATIO_CAP)
    percentage = ratio * 100
    return ScoreMetricDetail(
        score=min(MAX_SCORE, max(0.0, percentage)),
        benchmark=benchmark,
        value=value,
        percentage=percentage,
        weight=METRIC_WEIGHTS[metric],
    )


def _growth_rate_metric(value: float, benchmarks: BenchmarkTable) -> ScoreMetricDetail:
    benchmark = benchmarks.get(METRIC_SPECS["growth_rate"].benchmark_key)
    percentage = value / benchmark * 100
    if value >= 0:
        score = min(MAX_SCORE, percentage)
    else:
        score = max(MIN_GROWTH_SCORE, percentage)
    return ScoreMetricDetail(
        score=score,
        benchmark=benchmark,
        value=value,
        percentage=percentage,
        weight=METRIC_WEIGHTS["growth_rate"],
    )


def _annual_roi_metric(value: float, benchmarks: BenchmarkTable) -> ScoreMetricDetail:
    benchmark = benchmarks.get(METRIC_SPECS["annual_roi"].benchmark_key)
    score = 0.0
    percentage = 0.0
    if value > 0:
        percentage = value / benchmark * 100
        score = min(MAX_SCORE, percentage)
    return ScoreMetricDetail(
        score=score,
        benchmark=benchmark,
        value=value,
        percentage=percentage,
        weight=METRIC_WEIGHTS["annual_roi"],
    )


def evaluate_metrics(
    company: CompanyFacts,
    performance: PerformanceFacts,
    valuation: ValuationFacts,
    benchmarks: BenchmarkTable,
) -> dict[str, ScoreMetricDetail]:
    if performance.growth_rate is not None:
        growth_rate = performance.growth_rate
    else:
        growth_rate = valuation.annual_roi or 0.0
    market_size = performance.market_size or FALLBACK_MARKET_SIZE
    product_readiness = (
        performance.product_readiness
        if performance.product_readiness is not None
        else FALLBACK_PRODUCT_READINESS
    )

    return {
        "revenue": _ratio_metric("revenue", performance.revenue or 0.0, benchmarks),
        "gross_margin": _ratio_metric("gross_margin", performance.gross_margin or 0.0, benchmarks),
        "team_size": _ratio_metric("team_size", company.total_employees or 0.0, benchmarks),
        "valuation": _ratio_metric("valuation", valuation.selected_valuation or 0.0, benchmarks),
        "growth_rate": _growth_rate_metric(growth_rate, benchmarks),
        "cash_on_hand": _ratio_metric("cash_on_hand", performance.cash_on_hand or 0.0, benchmarks),
        "annual_roi": _annual_roi_metric(valuation.annual_roi or 0.0, benchmarks),
        "market_size": _ratio_metric("market_size", market_size, benchmarks),
        "product_readiness": _ratio_metric("product_readiness", product_readiness, benchmarks),
    }


def category_score(details: dict[str, ScoreMetricDetail], category: str) -> float:
    metrics = CATEGORY_METRICS[category]
    category_weight = sum(METRIC_WEIGHTS[m] for m in metrics)
    return sum(details[m].score * (METRIC_WEIGHTS[m] / category_weight) for m in metrics)


def total_score(details: dict[str, ScoreMetricDetail]) -> float:
    return sum(details[m].score * METRIC_WEIGHTS[m] for m in METRIC_WEIGHTS)


def aggregate_scores(company_id: str, details: dict[str, ScoreMetricDetail]) -> ScoreData:
    categories = {name: category_score(details, name) for name in CATEGORY_METRICS}
    total = total_score(details)
    logger.debug(
        "score_aggregated company=%s total=%.3f %s",
        company_id,
        total,
        " ".join(f"{k}={v:.3f}" for k, v in categories.items()),
    )
    return ScoreData(
        company_id=company_id,
        total_score=round_half_up(total),
        finance_score=round_half_up(categories["finance"]),
        team_score=round_half_up(categories["team"]),
        growth_score=round_half_up(categories["growth"]),
        market_score=round_half_up(categories["market"]),
        product_score=round_half_up(categories["product"]),
        details=details,
    )
