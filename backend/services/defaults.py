"""Immutable baseline values for every filter field and weight dimension.

The registry snapshots the model defaults once. Snapshots are read-only
mappings with list values frozen to tuples; callers that need something
they can edit get a fresh ``Criteria`` / ``Weights`` built from them.
"""

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel

from models.criteria import SECTION_NAMES, Criteria, UnknownSectionError, Weights


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def _snapshot(model: BaseModel) -> Mapping[str, Any]:
    return MappingProxyType(
        {name: _freeze(getattr(model, name)) for name in type(model).model_fields}
    )


class DefaultsRegistry:
    def __init__(self, criteria: Criteria | None = None, weights: Weights | None = None) -> None:
        criteria = criteria or Criteria()
        weights = weights or Weights()
        self._filters = MappingProxyType(
            {name: _snapshot(criteria.section(name).filters) for name in SECTION_NAMES}
        )
        self._enabled = MappingProxyType(
            {name: criteria.section(name).enabled for name in SECTION_NAMES}
        )
        self._interests = tuple(criteria.interests)
        self._weights = _snapshot(weights)

    @property
    def section_names(self) -> tuple[str, ...]:
        return tuple(self._filters)

    def filters(self, section: str) -> Mapping[str, Any]:
        try:
            return self._filters[section]
        except KeyError:
            raise UnknownSectionError(f"Unknown section: {section}") from None

    def enabled(self, section: str) -> bool:
        self.filters(section)
        return self._enabled[section]

    @property
    def weights(self) -> Mapping[str, Any]:
        return self._weights

    @property
    def interests(self) -> tuple[str, ...]:
        return self._interests

    def new_criteria(self) -> Criteria:
        """Fresh, mutable criteria initialised to the defaults."""
        return Criteria.model_validate(
            {
                **{
                    name: {
                        "enabled": self._enabled[name],
                        "filters": {k: _thaw(v) for k, v in filters.items()},
                    }
                    for name, filters in self._filters.items()
                },
                "interests": list(self._interests),
            }
        )

    def new_weights(self) -> Weights:
        return Weights(**self._weights)


DEFAULTS = DefaultsRegistry()
