"""Scenario recomputation over the held ranking result.

No network: candidates are re-scored in memory with the configured
strategy, annotated with the delta against the server's original score and
sorted by scenario score. The total count of the result is never touched.
"""

import logging
from typing import Sequence

from config import settings
from models.criteria import Criteria, Weights
from models.matching import MatchCandidate
from models.scenario import ScenarioAdjustment, ScenarioCandidate
from services.scenario.adjustments import describe_adjustments
from services.scenario.base import ScoringStrategy
from services.scenario.registry import get_strategy

logger = logging.getLogger(__name__)


class ScenarioEngine:
    def __init__(self, strategy: ScoringStrategy | None = None) -> None:
        self.strategy = strategy or get_strategy(settings.scoring_strategy)
        self.candidates: list[ScenarioCandidate] = []
        self.adjustments: list[ScenarioAdjustment] = []

    @property
    def active(self) -> bool:
        return bool(self.candidates)

    def apply_scenario(
        self,
        original: Sequence[MatchCandidate],
        scenario_criteria: Criteria,
        scenario_weights: Weights,
        baseline_criteria: Criteria | None = None,
    ) -> list[ScenarioCandidate]:
        scores = self.strategy.score_all(original, scenario_criteria, scenario_weights)
        scored = [
            ScenarioCandidate.from_candidate(candidate, score)
            for candidate, score in zip(original, scores)
        ]
        # sorted() is stable, so ties keep the server's order.
        self.candidates = sorted(scored, key=lambda c: c.score_scenario, reverse=True)
        self.adjustments = (
            describe_adjustments(baseline_criteria, scenario_criteria)
            if baseline_criteria is not None
            else []
        )
        logger.debug(
            "Scenario applied with %s over %d candidates", self.strategy.name, len(scored)
        )
        return self.candidates

    def reset_to_original(self) -> None:
        self.candidates = []
        self.adjustments = []
