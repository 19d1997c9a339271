from typing import Any, Literal

from pydantic import BaseModel

from models.criteria import CompletionStatus, Weights
from models.matching import GateDecision, MatchCandidate, Notice, UsageDisplay, UsageSummary
from models.scenario import ScenarioAdjustment, ScenarioCandidate


class TabStatus(BaseModel):
    tab: str
    status: CompletionStatus
    label: str


class RankingView(BaseModel):
    matches: list[MatchCandidate] = []
    total_count: int = 0
    locked_count: int = 0


class ScenarioView(BaseModel):
    active: bool = False
    candidates: list[ScenarioCandidate] = []
    adjustments: list[ScenarioAdjustment] = []


class SessionState(BaseModel):
    session_id: str
    criteria: dict[str, Any]
    weights: Weights
    statuses: list[TabStatus] = []
    min_match_percentage: int = 50
    pending: bool = False
    results: RankingView | None = None
    scenario: ScenarioView = ScenarioView()
    usage: UsageSummary | None = None
    usage_display: UsageDisplay | None = None
    notice: Notice | None = None
    auth_prompt: GateDecision | None = None


class GenerateResponse(BaseModel):
    outcome: Literal["success", "gated", "failed", "skipped", "discarded"]
    notice: Notice | None = None
    results: RankingView | None = None
