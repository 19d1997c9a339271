"""Usage quota for the ranking feature and gate decisions on ranking errors."""

import asyncio
import logging

from pydantic import ValidationError

from config import settings
from models.matching import GateDecision, UsageDisplay, UsageSummary
from models.result import GATE_CODES, Err, ErrorCode
from services.oracle_client import MalformedResponseError, OracleClient

logger = logging.getLogger(__name__)

GATE_FALLBACK_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.LOGIN_REQUIRED: (
        "Create a free account or sign in to reveal every matching university."
    ),
    ErrorCode.UPGRADE_REQUIRED: (
        "You have reached the limit for this feature on your current plan. "
        "Upgrade to keep generating matches without interruption."
    ),
}

PLAN_LABELS: dict[str, str] = {
    "anonymous": "Anonymous preview",
    "free": "Free plan",
    "pro": "Pro plan",
    "admin": "Admin",
}


class QuotaGate:
    def __init__(self, oracle: OracleClient, feature_key: str | None = None) -> None:
        self._oracle = oracle
        self.feature_key = feature_key or settings.ranking_feature_key
        self.usage: UsageSummary | None = None
        self._refresh_task: asyncio.Task | None = None
        self._closed = False

    async def fetch_usage(self) -> UsageSummary:
        result = await self._oracle.usage(self.feature_key)
        if isinstance(result, Err):
            logger.warning("Failed to load usage summary (%s): %s", result.code.value, result.message)
            usage = UsageSummary.unavailable()
        else:
            try:
                usage = UsageSummary.model_validate(result.value)
            except ValidationError as e:
                raise MalformedResponseError(f"Invalid usage summary: {e}") from e

        if not self._closed:
            self.usage = usage
        return usage

    def schedule_refresh(self) -> asyncio.Task:
        """Re-fetch usage in the background; the caller does not wait for it."""
        task = asyncio.ensure_future(self.fetch_usage())
        task.add_done_callback(_log_refresh_failure)
        self._refresh_task = task
        return task

    async def wait_for_refresh(self) -> UsageSummary | None:
        if self._refresh_task is None:
            return self.usage
        await asyncio.gather(self._refresh_task, return_exceptions=True)
        return self.usage

    def evaluate(self, error: Err) -> GateDecision | None:
        """Gate decision for a login or upgrade failure, None for anything else."""
        if error.code not in GATE_CODES:
            return None
        return GateDecision(
            code=error.code,
            message=error.message or GATE_FALLBACK_MESSAGES[error.code],
        )

    def close(self) -> None:
        self._closed = True


def _log_refresh_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Usage refresh failed: %s", exc, exc_info=exc)


def plan_label(plan_key: str | None) -> str:
    if plan_key is None:
        return "Plan"
    return PLAN_LABELS.get(plan_key, plan_key)


def describe_usage(usage: UsageSummary) -> UsageDisplay:
    """User-facing quota copy."""
    label = plan_label(usage.plan_key)
    if not usage.configured:
        return UsageDisplay(
            headline="Usage details are temporarily unavailable.",
            detail="We could not load your quota details. Try again after another attempt.",
            plan_label=label,
        )
    if usage.is_unlimited:
        return UsageDisplay(
            headline="Unlimited match runs enabled.",
            detail=f"You've generated {usage.used} matches so far. Feel free to keep exploring.",
            plan_label=label,
            unlimited=True,
        )
    return UsageDisplay(
        headline=f"{max(usage.remaining or 0, 0)} of {usage.limit_value or 0} match runs remaining.",
        detail=(
            f"You've generated {usage.used} matches in this window. "
            "Keep an eye on the counter to get the most out of your remaining runs."
        ),
        plan_label=label,
    )
