"""Best-effort persistence of the weight vector.

Saves go through the session's Debouncer so a slider dragged continuously
produces one request per quiet period. Only a login gate reaches the
caller; every other failure is logged and dropped.
"""

import logging
from typing import Callable

from pydantic import ValidationError

from config import settings
from models.criteria import DIMENSIONS, Weights
from models.matching import GateDecision
from models.result import Err, ErrorCode
from services.debouncer import Debouncer
from services.defaults import DEFAULTS, DefaultsRegistry
from services.oracle_client import MalformedResponseError, OracleClient

logger = logging.getLogger(__name__)

WEIGHTS_CHANNEL = "weights"
LOGIN_PROMPT_FALLBACK = "Please log in to save preferences."


class PreferenceSync:
    def __init__(
        self,
        oracle: OracleClient,
        debouncer: Debouncer,
        on_auth_required: Callable[[GateDecision], None],
        delay_ms: int | None = None,
        registry: DefaultsRegistry = DEFAULTS,
    ) -> None:
        self._oracle = oracle
        self._debouncer = debouncer
        self._on_auth_required = on_auth_required
        self._delay_ms = delay_ms if delay_ms is not None else settings.preferences_debounce_ms
        self._registry = registry
        self._closed = False

    def schedule(self, weights: Weights) -> None:
        self._debouncer.schedule(
            weights.model_copy(), self._delay_ms, self.sync, channel=WEIGHTS_CHANNEL
        )

    async def sync(self, weights: Weights) -> None:
        try:
            result = await self._oracle.save_preferences(weights.model_dump())
        except MalformedResponseError as e:
            logger.warning("Preferences saved but response was unreadable: %s", e)
            return

        if not isinstance(result, Err):
            logger.debug("Preferences saved")
            return
        if self._closed:
            return
        if result.code == ErrorCode.LOGIN_REQUIRED:
            self._on_auth_required(
                GateDecision(
                    code=ErrorCode.LOGIN_REQUIRED,
                    message=result.message or LOGIN_PROMPT_FALLBACK,
                )
            )
            return
        logger.warning("Failed to save preferences (%s): %s", result.code.value, result.message)

    async def load(self) -> Weights:
        """Stored weights, or the defaults when none are stored or they cannot be read."""
        try:
            result = await self._oracle.get_preferences()
        except MalformedResponseError as e:
            logger.warning("Unreadable preferences response: %s", e)
            return self._registry.new_weights()

        if isinstance(result, Err):
            logger.warning("Failed to load preferences (%s): %s", result.code.value, result.message)
            return self._registry.new_weights()
        if not isinstance(result.value, dict):
            return self._registry.new_weights()

        stored = result.value
        values = {
            dim: stored[dim] if stored.get(dim) is not None else self._registry.weights[dim]
            for dim in DIMENSIONS
        }
        try:
            return Weights(**values)
        except ValidationError as e:
            logger.warning("Stored preferences are invalid, using defaults: %s", e)
            return self._registry.new_weights()

    def close(self) -> None:
        self._closed = True
        self._debouncer.cancel(WEIGHTS_CHANNEL)
