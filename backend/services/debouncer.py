"""Delayed-commit primitive that coalesces rapid value changes.

Each channel holds at most one pending timer. Scheduling again on a channel
cancels the pending timer and restarts it with the latest value, so the
effect fires once per quiet period with the last value seen. Effects may be
plain callables or coroutine functions; coroutine results run as tasks on
the current event loop.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "default"

Effect = Callable[[Any], Awaitable[None] | None]


class Debouncer:
    def __init__(self) -> None:
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    def schedule(
        self,
        value: Any,
        delay_ms: float,
        effect: Effect,
        channel: str = DEFAULT_CHANNEL,
    ) -> None:
        if self._closed:
            raise RuntimeError("Debouncer is closed")
        loop = asyncio.get_running_loop()
        self.cancel(channel)
        self._timers[channel] = loop.call_later(
            delay_ms / 1000, self._fire, channel, value, effect
        )

    def pending(self, channel: str = DEFAULT_CHANNEL) -> bool:
        return channel in self._timers

    def cancel(self, channel: str = DEFAULT_CHANNEL) -> bool:
        """Drop the pending timer on ``channel``. Returns True if one was pending."""
        handle = self._timers.pop(channel, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def close(self) -> None:
        """Cancel every pending timer. Effects already running are left to finish."""
        self._closed = True
        for channel in list(self._timers):
            self.cancel(channel)

    async def drain(self) -> None:
        """Wait for effects that have already fired."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self, channel: str, value: Any, effect: Effect) -> None:
        self._timers.pop(channel, None)
        logger.debug("Debounced effect firing on channel %s", channel)
        outcome = effect(value)
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced effect failed: %s", exc, exc_info=exc)
