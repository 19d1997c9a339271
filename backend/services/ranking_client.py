"""Single ranking request against the oracle, with at most one in flight.

A failed attempt never touches the held result set. Usage is refreshed in
the background once every attempt settles, success or failure.
"""

import logging
from typing import Any

from pydantic import ValidationError

from models.criteria import Criteria, Weights
from models.matching import Notice, RankingOutcome, RankingResult
from models.result import Err
from services.oracle_client import MalformedResponseError, OracleClient
from services.quota_gate import QuotaGate

logger = logging.getLogger(__name__)

TRANSIENT_MESSAGE = "Unable to generate matches right now"


def build_match_payload(
    criteria: Criteria, weights: Weights, min_match_percentage: int
) -> dict[str, Any]:
    payload = criteria.to_payload()
    payload["weights"] = weights.model_dump()
    payload["minMatchPercentage"] = min_match_percentage
    return payload


def parse_ranking_response(body: Any) -> RankingResult:
    """Accept ``{matches, totalCount}`` or a bare list of matches."""
    if isinstance(body, list):
        matches, total = body, len(body)
    elif isinstance(body, dict) and isinstance(body.get("matches"), list):
        matches = body["matches"]
        total = body.get("totalCount")
        if total is None:
            total = len(matches)
    else:
        raise MalformedResponseError("Ranking response has no match list")

    try:
        return RankingResult(matches=matches, total_count=total)
    except ValidationError as e:
        raise MalformedResponseError(f"Invalid ranking response: {e}") from e


class RankingClient:
    def __init__(self, oracle: OracleClient, quota_gate: QuotaGate) -> None:
        self._oracle = oracle
        self._quota_gate = quota_gate
        self.result: RankingResult | None = None
        self._pending = False
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._pending

    async def generate(
        self, criteria: Criteria, weights: Weights, min_match_percentage: int
    ) -> RankingOutcome:
        if self._pending:
            logger.debug("Ranking request already in flight, ignoring generate")
            return RankingOutcome(kind="skipped")

        self._pending = True
        payload = build_match_payload(criteria, weights, min_match_percentage)
        try:
            response = await self._oracle.match(payload)
        finally:
            self._pending = False
            if not self._closed:
                self._quota_gate.schedule_refresh()

        if self._closed:
            logger.debug("Session closed while ranking was in flight, discarding response")
            return RankingOutcome(kind="discarded")

        if isinstance(response, Err):
            return self._failure(response)

        result = parse_ranking_response(response.value)
        self.result = result
        logger.info(
            "Ranking returned %d matches (%d total)", len(result.matches), result.total_count
        )
        return RankingOutcome(
            kind="success",
            result=result,
            notice=Notice(kind="success", message=f"{result.total_count} matches found"),
        )

    def _failure(self, error: Err) -> RankingOutcome:
        decision = self._quota_gate.evaluate(error)
        if decision is not None:
            logger.info("Ranking gated: %s", decision.code.value)
            return RankingOutcome(
                kind="gated",
                result=self.result,
                notice=Notice(kind="gate", message=decision.message, code=decision.code),
            )

        logger.error("Failed to fetch matches (%s): %s", error.code.value, error.message)
        return RankingOutcome(
            kind="failed",
            result=self.result,
            notice=Notice(kind="transient", message=TRANSIENT_MESSAGE, code=error.code),
        )

    def close(self) -> None:
        self._closed = True
