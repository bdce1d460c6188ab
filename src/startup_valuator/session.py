"""Per-session calculation state and the auto-trigger guard.

A caller may start a score calculation automatically once its data has
loaded.  The triggering condition can be re-evaluated many times, so the guard
latches on the first automatic attempt, before the calculation runs, and every
later automatic attempt in the session is refused.  Manual calculations bypass
the guard entirely.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from startup_valuator.engine import StartupEngine
from startup_valuator.exceptions import MissingPrerequisiteDataError, ValidationError
from startup_valuator.interfaces import QuestionnaireSource
from startup_valuator.models import CompanyFacts, ScoreData, ValuationFacts
from startup_valuator.questionnaire import AnswerBag

logger = logging.getLogger("startup_valuator.session")

T = TypeVar("T")


class CalculationState(Enum):
    IDLE = "idle"
    AUTO_TRIGGER_FIRED = "auto_trigger_fired"
    CALCULATING = "calculating"
    DONE = "done"


class AutoTriggerGuard:
    """At most one automatic invocation per session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = CalculationState.IDLE

    @property
    def state(self) -> CalculationState:
        return self._state

    def try_fire(self) -> bool:
        """Atomically move IDLE -> AUTO_TRIGGER_FIRED; False if already fired."""
        with self._lock:
            if self._state is not CalculationState.IDLE:
                return False
            self._state = CalculationState.AUTO_TRIGGER_FIRED
            return True

    def run(self, calculation: Callable[[], T]) -> T | None:
        """Run ``calculation`` if this is the session's first automatic attempt."""
        if not self.try_fire():
            logger.debug("auto_trigger_skipped state=%s", self._state.value)
            return None
        with self._lock:
            self._state = CalculationState.CALCULATING
        try:
            return calculation()
        finally:
            # The latch stays closed even when the calculation fails.
            with self._lock:
                self._state = CalculationState.DONE


class ScoringSession:
    """Calling-layer state for one user session.

    The engine itself stays stateless; everything latched lives here.
    """

    def __init__(
        self,
        engine: StartupEngine,
        questionnaire_source: QuestionnaireSource,
    ) -> None:
        self.engine = engine
        self.questionnaire_source = questionnaire_source
        self.guard = AutoTriggerGuard()
        self.last_error: str | None = None

    def calculate(self, company: CompanyFacts | None, valuation: ValuationFacts | None) -> ScoreData:
        """Manual calculation; not subject to the auto-trigger guard."""
        if company is None:
            raise MissingPrerequisiteDataError("Company data is required for this calculation.")
        answers = AnswerBag(self.questionnaire_source.list_answers(company.company_id))
        return self.engine.calculate_score(company, valuation, answers)

    def should_auto_calculate(
        self,
        company: CompanyFacts | None,
        valuation: ValuationFacts | None,
        latest_score: dict[str, Any] | None,
    ) -> bool:
        if company is None or valuation is None:
            return False
        return latest_score is None or not latest_score.get("total_score")

    def maybe_auto_calculate(
        self,
        company: CompanyFacts | None,
        valuation: ValuationFacts | None,
        latest_score: dict[str, Any] | None = None,
    ) -> ScoreData | None:
        """Auto-trigger hook; safe to call on every data refresh."""
        if not self.should_auto_calculate(company, valuation, latest_score):
            return None

        def _calculate() -> ScoreData | None:
            try:
                return self.calculate(company, valuation)
            except ValidationError as exc:
                self.last_error = str(exc)
                logger.warning("auto_calculation_failed error=%s", exc)
                return None

        return self.guard.run(_calculate)
