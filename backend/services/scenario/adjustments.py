"""Describe how a scenario's criteria differ from the baseline.

Impact is judged by whether the change loosens filtering (positive: more
universities can match) or tightens it (negative).
"""

from typing import Any

from models.criteria import SECTION_NAMES, Criteria
from models.scenario import ScenarioAdjustment
from services.completion import values_equal


def _label(field: str) -> str:
    for prefix in ("min_", "max_"):
        if field.startswith(prefix):
            field = field[len(prefix):]
    return field.replace("_", " ")


def _field_adjustment(criterion: str, field: str, old: Any, new: Any) -> ScenarioAdjustment:
    label = _label(field)
    impact = "neutral"
    description = f"Changing {label}"

    if isinstance(old, bool) or isinstance(new, bool):
        if new:
            impact, description = "negative", f"Requiring {label} narrows the options"
        else:
            impact, description = "positive", f"Dropping the {label} requirement widens the options"
    elif isinstance(old, (int, float)) and isinstance(new, (int, float)):
        loosens = new < old if field.startswith("min_") else new > old
        if field.startswith(("min_", "max_")):
            if loosens:
                impact, description = "positive", f"A looser {label} limit opens more universities"
            else:
                impact, description = "negative", f"A stricter {label} limit may reduce matches"
    elif isinstance(old, (list, tuple)) and isinstance(new, (list, tuple)):
        if len(new) < len(old):
            impact, description = "positive", f"Fewer required {label} widen the options"
        elif len(new) > len(old):
            impact, description = "negative", f"More required {label} narrow the options"
    elif isinstance(new, str):
        if new.strip().lower() == "any":
            impact, description = "positive", f"Opening {label} to any value increases options"
        elif str(old).strip().lower() == "any":
            impact, description = "negative", f"Focusing on {new} for {label}"
        else:
            description = f"Switching {label} from {old} to {new}"

    return ScenarioAdjustment(
        criterion=criterion,
        original_value=old,
        new_value=new,
        impact=impact,
        description=description,
    )


def describe_adjustments(baseline: Criteria, scenario: Criteria) -> list[ScenarioAdjustment]:
    adjustments: list[ScenarioAdjustment] = []

    for name in SECTION_NAMES:
        before = baseline.section(name)
        after = scenario.section(name)
        if before.enabled != after.enabled:
            adjustments.append(ScenarioAdjustment(
                criterion=f"{name}.enabled",
                original_value=before.enabled,
                new_value=after.enabled,
                impact="negative" if after.enabled else "positive",
                description=(
                    f"Applying {name} filters narrows the options"
                    if after.enabled
                    else f"Ignoring {name} filters widens the options"
                ),
            ))
        if not after.enabled:
            continue
        for field in type(after.filters).model_fields:
            old = getattr(before.filters, field)
            new = getattr(after.filters, field)
            if not values_equal(old, new):
                adjustments.append(_field_adjustment(f"{name}.{field}", field, old, new))

    if not values_equal(baseline.interests, scenario.interests):
        adjustments.append(
            _field_adjustment("interests", "interests", baseline.interests, scenario.interests)
        )
    return adjustments
