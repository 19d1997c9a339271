"""Completion status of each criteria tab relative to its defaults.

Sequence values compare element-wise: order and length both matter, so two
language lists holding the same entries in a different order count as a
change. Pure functions, no I/O; cheap enough to run on every edit.
"""

from typing import Any, Mapping

from pydantic import BaseModel

from models.criteria import Criteria, CompletionStatus, Weights
from services.defaults import DEFAULTS, DefaultsRegistry

WEIGHTS_TAB = "weights"

STATUS_LABELS: dict[CompletionStatus, str] = {
    CompletionStatus.DISABLED: "Disabled",
    CompletionStatus.DEFAULT: "Using defaults",
    CompletionStatus.COMPLETE: "Custom values (all fields changed)",
    CompletionStatus.INCOMPLETE: "Custom values (some fields unchanged)",
}


def values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(x == y for x, y in zip(a, b))
    return a == b


def _keys(obj: Mapping | BaseModel):
    if isinstance(obj, BaseModel):
        return type(obj).model_fields.keys()
    return obj.keys()


def _value(obj: Mapping | BaseModel, key: str) -> Any:
    if isinstance(obj, BaseModel):
        return getattr(obj, key, None)
    return obj.get(key)


def classify(
    live: Mapping | BaseModel,
    defaults: Mapping | BaseModel,
    enabled: bool = True,
) -> CompletionStatus:
    """Compare every key of ``defaults`` against ``live``."""
    if not enabled:
        return CompletionStatus.DISABLED

    has_changes = False
    all_changed = True
    for key in _keys(defaults):
        if values_equal(_value(live, key), _value(defaults, key)):
            all_changed = False
        else:
            has_changes = True

    if not has_changes:
        return CompletionStatus.DEFAULT
    return CompletionStatus.COMPLETE if all_changed else CompletionStatus.INCOMPLETE


def section_status(
    criteria: Criteria, section: str, registry: DefaultsRegistry = DEFAULTS
) -> CompletionStatus:
    live = criteria.section(section)
    return classify(live.filters, registry.filters(section), live.enabled)


def weights_status(weights: Weights, registry: DefaultsRegistry = DEFAULTS) -> CompletionStatus:
    # Weights have no enabled flag.
    return classify(weights, registry.weights, enabled=True)


def tab_statuses(
    criteria: Criteria, weights: Weights, registry: DefaultsRegistry = DEFAULTS
) -> dict[str, CompletionStatus]:
    """Statuses in tab order: weights first, then every section."""
    statuses = {WEIGHTS_TAB: weights_status(weights, registry)}
    for name in registry.section_names:
        statuses[name] = section_status(criteria, name, registry)
    return statuses
