"""Questionnaire answer parsing and input priority resolution.

Every field the calculators read is taken from the questionnaire when the
answer is usable and from :class:`~startup_valuator.config.ResolverDefaults`
otherwise.  Values tracked elsewhere (performance time series, the stored
company record) are never consulted as a middle tier, since they may be stale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from startup_valuator.config import ResolverDefaults
from startup_valuator.exceptions import InvalidNumericInputError, ValidationError
from startup_valuator.models import CompanyFacts, PerformanceFacts, ValuationFacts
from startup_valuator.validation import parse_number

logger = logging.getLogger("startup_valuator.questionnaire")

FOUNDERS = "1.1"
EMPLOYEES = "1.6"
PRODUCT_STAGE = "2.1"
PRODUCT_MARKET_FIT = "2.7"
SCALABILITY = "2.9"
MARKET_SIZE = "3.1"
GROSS_MARGIN = "4.3"
REVENUE = "6.1"
CASH_ON_HAND = "6.2"
GROWTH_RATE = "6.3"
BURN_RATE = "6.4"
RUNWAY_MONTHS = "6.5"
PROFIT_MARGIN = "6.6"
EXPECTED_VALUATION = "7.8"

SOURCE_QUESTIONNAIRE = "questionnaire"
SOURCE_DERIVED = "derived"
SOURCE_DEFAULT = "default"

# Expected valuations below this are read as "in millions".
MILLIONS_THRESHOLD = 1000.0


class _TieredAnswer(Enum):
    """Categorical answer with a fixed score and the text that selects it."""

    def __init__(self, label: str, score: float) -> None:
        self.label = label
        self.score = score

    @classmethod
    def parse(cls, answer: str | None) -> _TieredAnswer:
        if answer:
            for member in cls:
                if member.label and member.label.lower() in answer.lower():
                    return member
        return cls["UNRECOGNIZED"]


class ProductStage(_TieredAnswer):
    IDEA = ("Idea/Concept Only", 20.0)
    PROTOTYPE = ("Prototype/MVP", 40.0)
    LIMITED = ("Working Product with Limited Features", 60.0)
    COMPLETE = ("Complete Product with Full Functionality", 80.0)
    MATURE = ("Mature Product with Multiple Iterations", 100.0)
    UNRECOGNIZED = ("", 0.0)


class ProductMarketFit(_TieredAnswer):
    NO_METRICS = ("No Metrics Yet", 25.0)
    EARLY = ("Early Indicators but Not Conclusive", 50.0)
    STRONG = ("Strong Evidence of Product-Market Fit", 75.0)
    CLEAR = ("Clear Product-Market Fit with Retention Data", 100.0)
    UNRECOGNIZED = ("", 0.0)


class Scalability(_TieredAnswer):
    DIFFICULT = ("Difficult to Scale", 25.0)
    MODERATE = ("Moderately Scalable", 50.0)
    HIGH = ("Highly Scalable", 75.0)
    COMPLETE = ("Completely Scalable", 100.0)
    UNRECOGNIZED = ("", 0.0)


class MarketSizeBucket(_TieredAnswer):
    """Total addressable market range; ``score`` is the bucket ceiling in USD."""

    UNDER_100M = ("Less Than $100 Million", 100_000_000.0)
    UP_TO_1B = ("$100 Million - $1 Billion", 1_000_000_000.0)
    UP_TO_10B = ("$1 Billion - $10 Billion", 10_000_000_000.0)
    OVER_10B = ("More Than $10 Billion", 20_000_000_000.0)
    UNRECOGNIZED = ("", 0.0)


PRODUCT_READINESS_WEIGHTS: dict[type[_TieredAnswer], float] = {
    ProductStage: 0.4,
    ProductMarketFit: 0.3,
    Scalability: 0.3,
}


@dataclass(frozen=True)
class QuestionnaireAnswer:
    question_key: str
    answer: str | None

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> QuestionnaireAnswer:
        key = payload.get("question_key", payload.get("question_number"))
        if not isinstance(key, str) or not key:
            raise ValidationError("Questionnaire rows need a string 'question_key'.")
        answer = payload.get("answer", payload.get("response"))
        if answer is not None and not isinstance(answer, str):
            answer = str(answer)
        return QuestionnaireAnswer(question_key=key, answer=answer)


class AnswerBag:
    """Lookup over questionnaire rows; the first row for a key wins."""

    def __init__(self, rows: Iterable[QuestionnaireAnswer]) -> None:
        self._answers: dict[str, str | None] = {}
        for row in rows:
            self._answers.setdefault(row.question_key, row.answer)

    @staticmethod
    def from_payload(rows: Iterable[dict[str, Any]] | Mapping[str, Any] | None) -> AnswerBag:
        if rows is None:
            return AnswerBag(())
        if isinstance(rows, Mapping):
            return AnswerBag(
                QuestionnaireAnswer(str(k), None if v is None else str(v)) for k, v in rows.items()
            )
        return AnswerBag(QuestionnaireAnswer.from_dict(row) for row in rows)

    def text(self, key: str) -> str | None:
        answer = self._answers.get(key)
        if answer is None or not answer.strip():
            return None
        return answer

    def number(self, key: str) -> float | None:
        """Numeric answer, or None when absent or unparseable."""
        answer = self.text(key)
        if answer is None:
            return None
        try:
            return parse_number(answer, key)
        except InvalidNumericInputError as exc:
            logger.warning("invalid_numeric_answer question=%s error=%s", key, exc)
            return None

    def __len__(self) -> int:
        return len(self._answers)


@dataclass(frozen=True)
class ResolvedInputs:
    company: CompanyFacts
    performance: PerformanceFacts
    valuation: ValuationFacts
    sources: dict[str, str] = field(default_factory=dict)

    def inputs_used(self) -> dict[str, Any]:
        return {
            "performance": self.performance.to_dict(),
            "team_size": self.company.total_employees,
            "selected_valuation": self.valuation.selected_valuation,
            "annual_roi": self.valuation.annual_roi,
            "sources": dict(self.sources),
        }


def resolve_expected_valuation(answers: AnswerBag) -> float | None:
    value = answers.number(EXPECTED_VALUATION)
    if value is not None and 0 < value < MILLIONS_THRESHOLD:
        return value * 1_000_000
    return value


def resolve_cash_on_hand(answers: AnswerBag) -> tuple[float | None, str]:
    burn = answers.number(BURN_RATE)
    runway = answers.number(RUNWAY_MONTHS)
    if burn is not None and runway is not None:
        return burn * runway, SOURCE_DERIVED
    return answers.number(CASH_ON_HAND), SOURCE_QUESTIONNAIRE


def resolve_team_size(answers: AnswerBag) -> float | None:
    founders = answers.number(FOUNDERS)
    employees = answers.number(EMPLOYEES)
    if founders is None and employees is None:
        return None
    return (founders or 0.0) + (employees or 0.0)


def resolve_market_size(answers: AnswerBag) -> float | None:
    text = answers.text(MARKET_SIZE)
    bucket = MarketSizeBucket.parse(text)
    if bucket is MarketSizeBucket.UNRECOGNIZED:
        if text is not None:
            logger.warning("unrecognized_answer question=%s answer=%r", MARKET_SIZE, text)
        return None
    return bucket.score


def resolve_product_readiness(answers: AnswerBag) -> float | None:
    questions = {
        ProductStage: PRODUCT_STAGE,
        ProductMarketFit: PRODUCT_MARKET_FIT,
        Scalability: SCALABILITY,
    }
    total = 0.0
    recognized = False
    for tier_type, key in questions.items():
        text = answers.text(key)
        tier = tier_type.parse(text)
        if tier.name == "UNRECOGNIZED":
            if text is not None:
                logger.warning("unrecognized_answer question=%s answer=%r", key, text)
            continue
        recognized = True
        total += tier.score * PRODUCT_READINESS_WEIGHTS[tier_type]
    return total if recognized else None


def resolve_inputs(
    company: CompanyFacts,
    valuation: ValuationFacts,
    answers: AnswerBag,
    defaults: ResolverDefaults | None = None,
) -> ResolvedInputs:
    """Produce the canonical fact snapshots the scoring model consumes."""
    defaults = defaults or ResolverDefaults()
    sources: dict[str, str] = {}

    def pick(name: str, value: float | None, default: float, source: str = SOURCE_QUESTIONNAIRE) -> float:
        if value is None:
            sources[name] = SOURCE_DEFAULT
            return default
        sources[name] = source
        return value

    cash, cash_source = resolve_cash_on_hand(answers)
    growth_answer = answers.number(GROWTH_RATE)
    profit_margin = answers.number(PROFIT_MARGIN)
    roi_answer = profit_margin if profit_margin is not None else growth_answer
    expected_valuation = resolve_expected_valuation(answers)

    performance = PerformanceFacts(
        revenue=pick("revenue", answers.number(REVENUE), defaults.revenue),
        gross_margin=pick("gross_margin", answers.number(GROSS_MARGIN), defaults.gross_margin),
        cash_on_hand=pick("cash_on_hand", cash, defaults.cash_on_hand, cash_source),
        customers=pick("customers", None, defaults.customers),
        market_size=pick("market_size", resolve_market_size(answers), defaults.market_size, SOURCE_DERIVED),
        product_readiness=pick(
            "product_readiness",
            resolve_product_readiness(answers),
            defaults.product_readiness,
            SOURCE_DERIVED,
        ),
        growth_rate=pick("growth_rate", growth_answer, defaults.growth_rate),
    )
    resolved_company = replace(
        company,
        total_employees=pick("team_size", resolve_team_size(answers), defaults.team_size, SOURCE_DERIVED),
    )
    selected = pick("selected_valuation", expected_valuation, defaults.expected_valuation)
    resolved_valuation = replace(
        valuation,
        selected_valuation=selected,
        pre_money_valuation=selected,
        annual_roi=pick("annual_roi", roi_answer, defaults.annual_roi),
    )

    logger.debug(
        "inputs_resolved company=%s answers=%d defaults_used=%d",
        company.company_id,
        len(answers),
        sum(1 for s in sources.values() if s == SOURCE_DEFAULT),
    )
    return ResolvedInputs(
        company=resolved_company,
        performance=performance,
        valuation=resolved_valuation,
        sources=sources,
    )
