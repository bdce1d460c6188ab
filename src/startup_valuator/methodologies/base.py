"""Methodology abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from startup_valuator.config import DCFAssumptions
from startup_valuator.models import CompanyFacts, MethodEstimate, ValuationFacts
from startup_valuator.validation import non_negative


@dataclass(frozen=True)
class MethodologyContext:
    """Tunable assumptions shared by every methodology."""

    dcf: DCFAssumptions = field(default_factory=DCFAssumptions)


def normalized_stage(company: CompanyFacts) -> str:
    """Lower-cased stage label; a company without one is treated as seed."""
    return (company.stage or "").strip().lower() or "seed"


class ValuationMethodology(ABC):
    """Base class for all valuation methodologies.

    Subclasses MUST set ``name`` as a class attribute and implement ``estimate``.
    Missing drivers are read as zero, and ``valuate`` guarantees the result is a
    finite, non-negative amount.
    """

    name: str

    def valuate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        estimate = self.estimate(company, valuation, context)
        value = non_negative(estimate.value)
        if value != estimate.value:
            return MethodEstimate(
                value=value,
                derivation_steps=(
                    *estimate.derivation_steps,
                    f"Clamp {estimate.value!r} to a non-negative amount: {value:,.2f} USD.",
                ),
            )
        return estimate

    @abstractmethod
    def estimate(
        self,
        company: CompanyFacts,
        valuation: ValuationFacts,
        context: MethodologyContext,
    ) -> MethodEstimate:
        """Compute the raw estimate and its derivation steps."""
