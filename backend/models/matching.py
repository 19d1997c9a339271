"""Ranking results, usage quota and UI-facing outcomes."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from models.result import ErrorCode


class MatchCandidate(BaseModel):
    """One ranked university. Extra server fields are kept verbatim."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str | int
    score_original: int = Field(alias="matchPercentage", ge=0, le=100)

    def field(self, *keys: str) -> Any:
        """First non-null value among ``keys`` in the candidate's extra fields."""
        extra = self.model_extra or {}
        for key in keys:
            value = extra.get(key)
            if value is not None:
                return value
        return None


class RankingResult(BaseModel):
    """Server-ranked candidate set; ``total_count`` may exceed the revealed matches."""

    model_config = ConfigDict(frozen=True)

    matches: list[MatchCandidate] = []
    total_count: int = Field(0, ge=0)

    @property
    def locked_count(self) -> int:
        return max(self.total_count - len(self.matches), 0)


class UsageSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    configured: bool = False
    access_level: Literal["count", "unlimited"] | None = None
    limit_value: int | None = None
    remaining: int | None = None
    used: int = 0
    source: Literal["plan", "override", "admin"] | None = None
    plan_key: str | None = None

    @model_validator(mode="after")
    def _derive_remaining(self) -> "UsageSummary":
        if self.access_level == "count":
            self.remaining = max((self.limit_value or 0) - self.used, 0)
        return self

    @property
    def is_unlimited(self) -> bool:
        return self.access_level == "unlimited"

    @property
    def remaining_runs(self) -> float:
        """Runs left; unbounded when access is unlimited."""
        if self.is_unlimited:
            return float("inf")
        return max(self.remaining or 0, 0)

    @classmethod
    def unavailable(cls) -> "UsageSummary":
        return cls(configured=False, used=0)


class UsageDisplay(BaseModel):
    headline: str
    detail: str
    plan_label: str
    unlimited: bool = False


class GateDecision(BaseModel):
    """Blocking condition returned instead of ranking results."""

    model_config = ConfigDict(frozen=True)

    code: Literal[ErrorCode.LOGIN_REQUIRED, ErrorCode.UPGRADE_REQUIRED]
    message: str


class Notice(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["gate", "transient", "success"]
    message: str
    code: ErrorCode | None = None
    dismissible: bool = True


class RankingOutcome(BaseModel):
    """What a generate attempt produced, for the UI to render."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success", "gated", "failed", "skipped", "discarded"]
    result: RankingResult | None = None
    notice: Notice | None = None
