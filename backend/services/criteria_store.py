"""Live edit buffer for criteria and weights.

Edits are validated before they land: a batch of filter changes either
applies completely or not at all.
"""

from typing import Any, Iterable, Mapping

from models.criteria import (
    DIMENSIONS,
    Criteria,
    CompletionStatus,
    UnknownFieldError,
    Weights,
    resolve_field,
)
from services.completion import tab_statuses
from services.defaults import DEFAULTS, DefaultsRegistry


class CriteriaStore:
    def __init__(
        self,
        registry: DefaultsRegistry = DEFAULTS,
        criteria: Criteria | None = None,
        weights: Weights | None = None,
    ) -> None:
        self.registry = registry
        self.criteria = criteria or registry.new_criteria()
        self.weights = weights or registry.new_weights()

    def fork(self) -> "CriteriaStore":
        """Independent copy, e.g. to build a scenario without touching live state."""
        return CriteriaStore(
            self.registry,
            criteria=self.criteria.model_copy(deep=True),
            weights=self.weights.model_copy(),
        )

    def set_enabled(self, section: str, enabled: bool) -> None:
        self.criteria.section(section).enabled = enabled

    def update_filters(self, section: str, changes: Mapping[str, Any]) -> None:
        live = self.criteria.section(section)
        updated = live.filters.model_copy(deep=True)
        filters_type = type(updated)
        for field, value in changes.items():
            setattr(updated, resolve_field(filters_type, field), value)
        live.filters = updated

    def reset_section(self, section: str) -> None:
        defaults = self.registry.filters(section)
        self.update_filters(
            section, {k: list(v) if isinstance(v, tuple) else v for k, v in defaults.items()}
        )
        self.set_enabled(section, self.registry.enabled(section))

    def set_interests(self, interests: Iterable[str]) -> None:
        # Keep first-seen order, drop duplicates.
        self.criteria.interests = list(dict.fromkeys(interests))

    def toggle_interest(self, interest: str) -> None:
        current = self.criteria.interests
        if interest in current:
            self.criteria.interests = [i for i in current if i != interest]
        else:
            self.criteria.interests = [*current, interest]

    def set_weights(self, changes: Mapping[str, float]) -> Weights:
        unknown = set(changes) - set(DIMENSIONS)
        if unknown:
            raise UnknownFieldError(f"Unknown weight dimension(s): {', '.join(sorted(unknown))}")
        updated = self.weights.model_copy()
        for dim, value in changes.items():
            setattr(updated, dim, value)
        self.weights = updated
        return updated

    def replace_weights(self, weights: Weights) -> None:
        self.weights = weights

    def statuses(self) -> dict[str, CompletionStatus]:
        return tab_statuses(self.criteria, self.weights, self.registry)
