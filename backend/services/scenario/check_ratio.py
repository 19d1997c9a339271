"""Share of applicable checks passed, the ranking server's own formula."""

from models.criteria import Weights
from services.scenario.base import round_percentage
from services.scenario.checks import Check, CheckStrategy


class CheckRatioStrategy(CheckStrategy):
    name = "check_ratio"

    def _combine(self, outcomes: list[tuple[Check, bool]], weights: Weights) -> int:
        passed = sum(1 for _, ok in outcomes if ok)
        return round_percentage(passed, len(outcomes))
