"""Benchmark resolution: built-in defaults, industry values and user overrides."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("startup_valuator.benchmarks")

DEFAULT_BENCHMARKS: dict[str, float] = {
    "avg_revenue": 350_000.0,
    "avg_gross_margin": 65.0,
    "avg_team_size": 15.0,
    "avg_valuation": 1_500_000.0,
    "avg_growth_rate": 25.0,
    "avg_cash_on_hand": 150_000.0,
    "avg_annual_roi": 20.0,
    "avg_market_size": 5_000_000.0,
    "product_readiness": 100.0,
}

SOURCE_DEFAULT = "default"
SOURCE_INDUSTRY = "industry"
SOURCE_USER = "user"


@dataclass(frozen=True)
class BenchmarkTable:
    """Complete metric -> reference value lookup.

    Built once per calculation by :func:`resolve_benchmarks` and passed
    explicitly; resolve again after any benchmark edit.
    """

    values: Mapping[str, float]
    sources: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str) -> float:
        return self.values.get(key, DEFAULT_BENCHMARKS[key])

    def source_of(self, key: str) -> str:
        return self.sources.get(key, SOURCE_DEFAULT)

    def to_dict(self) -> dict[str, float]:
        return dict(self.values)


def _usable_overrides(layer: Mapping[str, Any] | None, layer_name: str) -> dict[str, float]:
    if not layer:
        return {}
    usable: dict[str, float] = {}
    for key, value in layer.items():
        if key not in DEFAULT_BENCHMARKS:
            logger.debug("benchmark_ignored layer=%s metric=%s reason=unknown_metric", layer_name, key)
            continue
        # bool is an int subclass; only real numbers count as benchmark values.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("benchmark_ignored layer=%s metric=%s reason=not_numeric", layer_name, key)
            continue
        if not math.isfinite(value) or value <= 0:
            logger.warning(
                "benchmark_ignored layer=%s metric=%s reason=non_positive value=%s",
                layer_name,
                key,
                value,
            )
            continue
        usable[key] = float(value)
    return usable


def resolve_benchmarks(
    user_overrides: Mapping[str, Any] | None = None,
    industry_values: Mapping[str, Any] | None = None,
) -> BenchmarkTable:
    """Merge benchmark layers; precedence is user > industry > default."""
    values = dict(DEFAULT_BENCHMARKS)
    sources = {key: SOURCE_DEFAULT for key in values}

    user = _usable_overrides(user_overrides, SOURCE_USER)
    industry = _usable_overrides(industry_values, SOURCE_INDUSTRY)

    for key, value in industry.items():
        if key in user:
            continue
        values[key] = value
        sources[key] = SOURCE_INDUSTRY
    for key, value in user.items():
        values[key] = value
        sources[key] = SOURCE_USER

    logger.debug(
        "benchmarks_resolved user=%d industry=%d",
        len(user),
        sum(1 for s in sources.values() if s == SOURCE_INDUSTRY),
    )
    return BenchmarkTable(values=values, sources=sources)
