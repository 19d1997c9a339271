"""Client-side what-if re-ranking over an already fetched candidate set."""

from services.scenario.base import ScoringStrategy
from services.scenario.engine import ScenarioEngine
from services.scenario.registry import get_strategy

__all__ = [
    "ScenarioEngine",
    "ScoringStrategy",
    "get_strategy",
]
