"""Outlier dampening across valuation methods.

The five methods can disagree by orders of magnitude (a heuristic method on a
pre-revenue company versus a cash-flow method with no revenue).  When the
spread between the largest and smallest positive estimate exceeds the
threshold, estimates are clamped into a band around the median of the positive
estimates.  Zero estimates stay zero.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

from startup_valuator.config import NormalizationSettings

logger = logging.getLogger("startup_valuator.normalization")


@dataclass(frozen=True)
class NormalizationReport:
    values: dict[str, float]
    geometric_mean: float
    median: float
    spread: float
    applied: bool


def geometric_mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return math.exp(sum(math.log(v) for v in values) / len(values))


def upper_median(values: list[float]) -> float:
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def normalize_method_values(
    values: Mapping[str, float],
    settings: NormalizationSettings | None = None,
) -> NormalizationReport:
    settings = settings or NormalizationSettings()
    result = dict(values)
    positive = [v for v in values.values() if v > 0]
    if not positive:
        return NormalizationReport(result, 0.0, 0.0, 0.0, applied=False)

    geo_mean = geometric_mean(positive)
    median = upper_median(positive)
    spread = max(positive) / min(positive)
    if spread <= settings.spread_threshold:
        return NormalizationReport(result, geo_mean, median, spread, applied=False)

    floor = median * settings.floor_fraction
    ceiling = median * settings.ceiling_multiple
    for key, value in values.items():
        if value <= 0:
            continue
        if value < floor:
            result[key] = floor
        elif value > ceiling:
            result[key] = ceiling

    clamped = sorted(k for k in values if result[k] != values[k])
    logger.info(
        "normalization_applied spread=%.1f median=%.2f geometric_mean=%.2f clamped=%s",
        spread,
        median,
        geo_mean,
        ",".join(clamped) or "none",
    )
    return NormalizationReport(result, geo_mean, median, spread, applied=True)
