"""Scenario (what-if) views over an already fetched candidate set."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from models.matching import MatchCandidate


class ScenarioTrend(str, Enum):
    IMPROVED = "improved"
    WORSENED = "worsened"
    UNCHANGED = "unchanged"


def trend_for(delta: int) -> ScenarioTrend:
    if delta > 0:
        return ScenarioTrend.IMPROVED
    if delta < 0:
        return ScenarioTrend.WORSENED
    return ScenarioTrend.UNCHANGED


class ScenarioCandidate(MatchCandidate):
    """A candidate re-scored under hypothetical criteria.

    ``delta`` and ``trend`` are always derived from the two scores; values
    supplied by the caller are ignored.
    """

    score_scenario: int = Field(alias="scoreScenario", ge=0, le=100)
    delta: int = 0
    trend: ScenarioTrend = ScenarioTrend.UNCHANGED

    @model_validator(mode="before")
    @classmethod
    def _derive_delta(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        original = data.get("matchPercentage", data.get("score_original"))
        scenario = data.get("scoreScenario", data.get("score_scenario"))
        if isinstance(original, int) and isinstance(scenario, int):
            delta = scenario - original
            data = {**data, "delta": delta, "trend": trend_for(delta)}
        return data

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate, score_scenario: int) -> "ScenarioCandidate":
        data = candidate.model_dump(by_alias=True)
        data["scoreScenario"] = score_scenario
        return cls.model_validate(data)


class ScenarioAdjustment(BaseModel):
    """How one criterion differs between the baseline and the scenario."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    criterion: str
    original_value: Any = None
    new_value: Any = None
    impact: Literal["positive", "negative", "neutral"] = "neutral"
    description: str = ""
