"""Debounced saving: bursts of changes produce one write."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

log = logging.getLogger(__name__)


class DebouncedSaver:
    """
    Coalesces ``schedule()`` calls into one ``save()`` after ``delay`` seconds
    of quiet.

    ``flush()`` must be awaited before shutdown; it cancels the pending timer
    and saves unconditionally.
    """

    def __init__(self, save: Callable[[], Awaitable[None]], delay: float = 0.2) -> None:
        self._save = save
        self._delay = delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self) -> None:
        """(Re)start the quiet period. Needs a running event loop."""
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self._task = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        try:
            await self._save()
        except Exception:
            log.exception("Debounced save failed")

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def flush(self) -> None:
        self.cancel()
        if self._task is not None and not self._task.done():
            await self._task
        await self._save()
