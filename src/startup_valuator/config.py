"""Engine configuration.

Every tunable constant of the valuation and scoring model lives here as a
frozen dataclass so callers can override it per request instead of editing
literals inside the calculators.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

from startup_valuator.exceptions import ValidationError
from startup_valuator.validation import parse_number

DEFAULT_DB_PATH = "startup_valuator.db"


@dataclass(frozen=True)
class DCFAssumptions:
    discount_rate: float = 0.25
    terminal_multiple: float = 10.0
    projection_years: int = 5
    perpetual_growth: float = 0.03
    # Percent values, as entered on the valuation record.
    margin_floor_pct: float = 5.0
    default_margin_pct: float = 15.0
    default_growth_pct: float = 20.0
    default_industry_multiple: float = 8.0
    revenue_multiple_discount: float = 0.8


@dataclass(frozen=True)
class NormalizationSettings:
    spread_threshold: float = 100.0
    floor_fraction: float = 0.01
    ceiling_multiple: float = 100.0


@dataclass(frozen=True)
class ResolverDefaults:
    """Values used when the questionnaire has no usable answer."""

    revenue: float = 3234.0
    gross_margin: float = 31.0
    cash_on_hand: float = 134.0
    customers: float = 700.0
    market_size: float = 4_000_000.0
    product_readiness: float = 75.0
    growth_rate: float = 33.0
    team_size: float = 15.0
    expected_valuation: float = 64_000.0
    annual_roi: float = 33.0


@dataclass(frozen=True)
class EngineSettings:
    dcf: DCFAssumptions = field(default_factory=DCFAssumptions)
    normalization: NormalizationSettings = field(default_factory=NormalizationSettings)
    resolver_defaults: ResolverDefaults = field(default_factory=ResolverDefaults)
    investment_pct: float = 0.15

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> EngineSettings:
        """Build settings from a partial mapping, e.g. ``{"dcf": {"discount_rate": 0.3}}``."""
        settings = EngineSettings()
        sections = {
            "dcf": settings.dcf,
            "normalization": settings.normalization,
            "resolver_defaults": settings.resolver_defaults,
        }
        overrides: dict[str, Any] = {}
        for section_name, current in sections.items():
            section_payload = payload.get(section_name) or {}
            if not isinstance(section_payload, dict):
                raise ValidationError(f"Settings section '{section_name}' must be an object.")
            known = {f.name: f.type for f in fields(current)}
            changes: dict[str, Any] = {}
            for key, raw in section_payload.items():
                if key not in known:
                    continue
                value = parse_number(raw, f"{section_name}.{key}")
                changes[key] = int(value) if key == "projection_years" else value
            if changes:
                overrides[section_name] = replace(current, **changes)
        if "investment_pct" in payload:
            overrides["investment_pct"] = parse_number(payload["investment_pct"], "investment_pct")
        return replace(settings, **overrides)
