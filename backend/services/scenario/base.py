"""Abstract base class for scenario scoring strategies."""

from abc import ABC, abstractmethod
import math
from typing import Sequence

from models.criteria import Criteria, Weights
from models.matching import MatchCandidate


class ScoringStrategy(ABC):
    """Scores one candidate under a criteria snapshot.

    The real formula lives on the ranking server, so strategies are swappable.
    Subclasses must implement:
        - name: identifier used in the strategy registry
        - score(): an integer in [0, 100]
    """

    name: str = ""

    @abstractmethod
    def score(self, candidate: MatchCandidate, criteria: Criteria, weights: Weights) -> int:
        """Return the candidate's match percentage under ``criteria``."""

    def score_all(
        self, candidates: Sequence[MatchCandidate], criteria: Criteria, weights: Weights
    ) -> list[int]:
        return [self.score(candidate, criteria, weights) for candidate in candidates]


def round_percentage(part: float, whole: float) -> int:
    """Half-up rounding of ``part / whole`` as a percentage, clamped to [0, 100]."""
    if whole <= 0:
        return 100
    value = math.floor(part / whole * 100 + 0.5)
    return max(0, min(100, value))
