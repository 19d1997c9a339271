"""Scoring strategy registry.

Strategies are stateless, so one instance per name is created on first use.
"""

import logging

from services.scenario.base import ScoringStrategy

logger = logging.getLogger(__name__)

_registry: dict[str, ScoringStrategy] = {}


def _create_strategy(name: str) -> ScoringStrategy:
    """Factory: create a strategy by name with deferred imports."""
    if name == "check_ratio":
        from services.scenario.check_ratio import CheckRatioStrategy
        return CheckRatioStrategy()
    elif name == "weighted":
        from services.scenario.weighted import WeightedStrategy
        return WeightedStrategy()
    else:
        raise ValueError(f"Unknown scoring strategy: {name}")


def get_strategy(name: str) -> ScoringStrategy:
    """Get a strategy by name, creating it on first access."""
    if name not in _registry:
        _registry[name] = _create_strategy(name)
        logger.info("Scoring strategy ready: %s", name)
    return _registry[name]


def clear() -> None:
    """Forget all strategies. Useful for testing."""
    _registry.clear()
