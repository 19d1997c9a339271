"""Check ratio where each check counts by the weight of its dimension.

Falls back to the plain ratio when every applicable weight is zero. A
client-side estimate, so "Any" always means no filter and test policy is
checked under admissions.
"""

from models.criteria import Weights
from services.scenario.base import round_percentage
from services.scenario.checks import Check, CheckStrategy


class WeightedStrategy(CheckStrategy):
    name = "weighted"
    server_rules = False

    def _combine(self, outcomes: list[tuple[Check, bool]], weights: Weights) -> int:
        total = sum(getattr(weights, check.dimension) for check, _ in outcomes)
        if total <= 0:
            passed = sum(1 for _, ok in outcomes if ok)
            return round_percentage(passed, len(outcomes))
        passed = sum(getattr(weights, check.dimension) for check, ok in outcomes if ok)
        return round_percentage(passed, total)
