"""Debounce and staleness control for name resolution.

Every keystroke in the name field supersedes whatever resolution is in
flight. Each resolution takes a ticket from a monotonically increasing
generation counter, and its result is applied only while that ticket is
still current. Superseded lookups are not aborted; their results are
dropped when they arrive.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[object]]


class ResolutionCoordinator:
    """Decides when a name change triggers a lookup, and which result wins."""

    def __init__(self, quiet_period: float = 0.5):
        self.quiet_period = quiet_period
        self._generation = 0
        self._timer: asyncio.Task | None = None
        # Debounced callbacks that have fired and are still running
        self._running: set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """True while a debounce timer is armed."""
        return self._timer is not None and not self._timer.done()

    def begin(self) -> int:
        """Start a resolution and return its ticket."""
        self._generation += 1
        return self._generation

    def invalidate(self) -> None:
        """Supersede any in-flight resolution without starting a new one."""
        self._generation += 1

    def is_current(self, ticket: int) -> bool:
        return ticket == self._generation

    def schedule(self, callback: Callback) -> None:
        """Run callback once the input has been quiet for the quiet period.

        Restarts the timer if one is already armed. Must be called from a
        running event loop.
        """
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._fire_later(callback))
        task.add_done_callback(self._running.discard)
        self._timer = task

    async def settle(self, callback: Callback):
        """Run callback now, dropping any armed timer (e.g. on focus loss)."""
        self.cancel()
        return await callback()

    def cancel(self) -> None:
        """Disarm the debounce timer, if any."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    @property
    def running(self) -> bool:
        """True while a fired debounced callback is still in progress."""
        return bool(self._running)

    def close(self) -> None:
        """Disarm the timer and cancel any debounced callback still running."""
        self.cancel()
        for task in list(self._running):
            task.cancel()

    async def _fire_later(self, callback: Callback) -> None:
        await asyncio.sleep(self.quiet_period)
        # The timer has fired; from here on a new keystroke must not cancel
        # the callback, it only makes the result stale.
        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        self._running.add(task)
        try:
            await callback()
        except Exception:
            logger.exception("Debounced resolution failed")
