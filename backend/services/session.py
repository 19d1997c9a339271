"""One user's matching session: the engine components wired together.

Flow:
    edits             -> CriteriaStore -> tab statuses (pure, on demand)
    weight edits      -> Debouncer -> PreferenceSync (best effort)
    generate()        -> RankingClient -> oracle, then QuotaGate refresh
    apply_scenario()  -> ScenarioEngine over the held result (no network)

Closing the session cancels pending debounce timers; responses that land
after close are discarded.
"""

import logging
from typing import Any, Iterable, Mapping

from config import settings
from models.criteria import CompletionStatus, Weights
from models.matching import GateDecision, Notice, RankingOutcome
from models.scenario import ScenarioCandidate
from models.session import SessionContext
from services.criteria_store import CriteriaStore
from services.debouncer import Debouncer
from services.defaults import DEFAULTS, DefaultsRegistry
from services.oracle_client import OracleClient
from services.preference_sync import PreferenceSync
from services.quota_gate import QuotaGate
from services.ranking_client import RankingClient
from services.scenario import ScenarioEngine, ScoringStrategy

logger = logging.getLogger(__name__)


class NoResultsError(ValueError):
    """A scenario needs a ranking result to work on."""


class MatchingSession:
    def __init__(
        self,
        context: SessionContext,
        oracle: OracleClient,
        registry: DefaultsRegistry = DEFAULTS,
        strategy: ScoringStrategy | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        self.context = context
        self._oracle = oracle
        self.store = CriteriaStore(registry)
        self.debouncer = Debouncer()
        self.preferences = PreferenceSync(
            oracle, self.debouncer, self._on_auth_required, delay_ms=debounce_ms, registry=registry
        )
        self.quota = QuotaGate(oracle)
        self.ranking = RankingClient(oracle, self.quota)
        self.scenario = ScenarioEngine(strategy)
        self.min_match_percentage = settings.default_min_match_percentage
        self.notice: Notice | None = None
        self.auth_prompt: GateDecision | None = None
        self.closed = False

    async def start(self) -> None:
        """Load stored weights and the current quota."""
        weights = await self.preferences.load()
        if self.closed:
            return
        self.store.replace_weights(weights)
        await self.quota.fetch_usage()

    # --- Editing ---------------------------------------------------------

    def update_section(
        self,
        section: str,
        enabled: bool | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> None:
        if filters:
            self.store.update_filters(section, filters)
        if enabled is not None:
            self.store.set_enabled(section, enabled)

    def set_interests(self, interests: Iterable[str]) -> None:
        self.store.set_interests(interests)

    def set_weights(self, changes: Mapping[str, float]) -> Weights:
        weights = self.store.set_weights(changes)
        self.preferences.schedule(weights)
        return weights

    def set_min_match_percentage(self, value: int) -> None:
        self.min_match_percentage = max(0, min(100, int(value)))

    def statuses(self) -> dict[str, CompletionStatus]:
        return self.store.statuses()

    # --- Ranking ---------------------------------------------------------

    async def generate(self) -> RankingOutcome:
        if not self.ranking.pending:
            self.notice = None
            self.scenario.reset_to_original()

        outcome = await self.ranking.generate(
            self.store.criteria, self.store.weights, self.min_match_percentage
        )
        if outcome.notice is not None and not self.closed:
            self.notice = outcome.notice
        return outcome

    # --- Scenario --------------------------------------------------------

    def apply_scenario(
        self,
        sections: Mapping[str, Mapping[str, Any]] | None = None,
        interests: Iterable[str] | None = None,
        weights: Mapping[str, float] | None = None,
    ) -> list[ScenarioCandidate]:
        """Re-score the held result under the live criteria with overrides applied."""
        result = self.ranking.result
        if result is None:
            raise NoResultsError("Generate matches before running a scenario")

        draft = self.store.fork()
        for name, changes in (sections or {}).items():
            draft.update_filters(name, changes.get("filters") or {})
            if changes.get("enabled") is not None:
                draft.set_enabled(name, changes["enabled"])
        if interests is not None:
            draft.set_interests(interests)
        if weights:
            draft.set_weights(weights)

        return self.scenario.apply_scenario(
            result.matches, draft.criteria, draft.weights, baseline_criteria=self.store.criteria
        )

    def reset_to_original(self) -> None:
        self.scenario.reset_to_original()

    # --- Notices ---------------------------------------------------------

    def dismiss_notice(self) -> None:
        self.notice = None

    def dismiss_auth_prompt(self) -> None:
        self.auth_prompt = None

    def _on_auth_required(self, decision: GateDecision) -> None:
        if not self.closed:
            self.auth_prompt = decision

    # --- Teardown --------------------------------------------------------

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.debouncer.close()
        self.preferences.close()
        self.ranking.close()
        self.quota.close()
        await self._oracle.aclose()
        logger.debug("Matching session closed")
