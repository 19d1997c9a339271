from typing import Any

from pydantic import BaseModel, Field


class SectionUpdateRequest(BaseModel):
    enabled: bool | None = None
    filters: dict[str, Any] = Field(default_factory=dict, description="Field name -> new value")


class InterestsRequest(BaseModel):
    interests: list[str] = Field(..., max_length=50)


class WeightsUpdateRequest(BaseModel):
    weights: dict[str, float] = Field(..., description="Dimension -> importance in [0, 1]")


class MinMatchRequest(BaseModel):
    min_match_percentage: int = Field(..., ge=0, le=100)


class ScenarioRequest(BaseModel):
    sections: dict[str, SectionUpdateRequest] = Field(default_factory=dict)
    interests: list[str] | None = None
    weights: dict[str, float] = Field(default_factory=dict)
