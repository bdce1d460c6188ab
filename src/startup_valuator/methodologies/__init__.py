"""Valuation methodologies and their registry."""

from __future__ import annotations

from .base import MethodologyContext, ValuationMethodology
from .checklist import ChecklistMethodology
from .dcf import DCFGrowthMethodology, DCFMultipleMethodology
from .scorecard import ScorecardMethodology
from .venture_capital import VentureCapitalMethodology

METHODOLOGIES: tuple[ValuationMethodology, ...] = (
    ScorecardMethodology(),
    ChecklistMethodology(),
    VentureCapitalMethodology(),
    DCFGrowthMethodology(),
    DCFMultipleMethodology(),
)

METHOD_NAMES: tuple[str, ...] = tuple(m.name for m in METHODOLOGIES)

__all__ = [
    "METHODOLOGIES",
    "METHOD_NAMES",
    "ChecklistMethodology",
    "DCFGrowthMethodology",
    "DCFMultipleMethodology",
    "MethodologyContext",
    "ScorecardMethodology",
    "ValuationMethodology",
    "VentureCapitalMethodology",
]
