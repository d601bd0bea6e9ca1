"""
Debouncer — run an async action once input has settled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta


logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delays an action until trigger() stops being called for `delay`.

    Example:
        lookup = Debouncer(timedelta(milliseconds=500), find_draft)
        lookup.trigger()      # keystroke
        lookup.trigger()      # keystroke, restarts the timer
        await lookup.flush()  # blur: run now, drop the timer
    """

    def __init__(self, delay: timedelta, action: Callable[[], Awaitable[object]]) -> None:
        self.delay = delay
        self.action = action
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._later())
        self._task.add_done_callback(self._report)

    async def flush(self) -> None:
        self.cancel()
        await self.action()

    async def wait(self) -> None:
        """Wait for a scheduled run, if any."""
        if self._task is not None:
            await asyncio.wait({self._task})

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _later(self) -> None:
        await asyncio.sleep(self.delay.total_seconds())
        await self.action()

    @staticmethod
    def _report(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            logger.error("Debounced action failed", exc_info=exc)


__all__ = ("Debouncer",)
