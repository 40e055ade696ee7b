"""Timer registry — every scheduled callback is tracked so it can be mass-cancelled.

Entries live in an id-keyed arena and are removed as soon as they fire or are
cancelled, so nothing accumulates across runs. Each entry carries an owner
tag, letting one component cancel only its own chain while ``cancel_all()``
without an owner tears everything down.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_OWNER = "default"


@dataclass
class _Entry:
    handle: asyncio.TimerHandle
    owner: str
    # Set for sleep() entries: resolves True when elapsed, False when cancelled
    waiter: asyncio.Future | None = None


class TimerRegistry:
    """Arena of cancellable timer handles on the running event loop."""

    def __init__(self) -> None:
        self._entries: dict[int, _Entry] = {}
        self._ids = itertools.count(1)

    def schedule(
        self,
        delay: float,
        callback: Callable[..., Any],
        *args: Any,
        owner: str = DEFAULT_OWNER,
    ) -> int:
        """Run ``callback(*args)`` after ``delay`` seconds. Returns the entry id."""
        loop = asyncio.get_running_loop()
        timer_id = next(self._ids)

        def _fire() -> None:
            if self._entries.pop(timer_id, None) is None:
                return
            callback(*args)

        handle = loop.call_later(max(delay, 0.0), _fire)
        self._entries[timer_id] = _Entry(handle=handle, owner=owner)
        return timer_id

    async def sleep(self, delay: float, *, owner: str = DEFAULT_OWNER) -> bool:
        """Wait ``delay`` seconds. Returns False if the wait was cancelled."""
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        def _wake() -> None:
            if not waiter.done():
                waiter.set_result(True)

        timer_id = self.schedule(delay, _wake, owner=owner)
        self._entries[timer_id].waiter = waiter
        try:
            return await waiter
        finally:
            self.cancel(timer_id)

    def cancel(self, timer_id: int) -> bool:
        entry = self._entries.pop(timer_id, None)
        if entry is None:
            return False
        entry.handle.cancel()
        if entry.waiter is not None and not entry.waiter.done():
            entry.waiter.set_result(False)
        return True

    def cancel_all(self, owner: str | None = None) -> int:
        """Cancel every pending entry (or only ``owner``'s). Returns how many."""
        ids = [
            tid for tid, entry in self._entries.items()
            if owner is None or entry.owner == owner
        ]
        for tid in ids:
            self.cancel(tid)
        if ids:
            logger.debug("Cancelled %d timer(s) (owner=%s)", len(ids), owner or "*")
        return len(ids)

    def pending(self, owner: str | None = None) -> int:
        if owner is None:
            return len(self._entries)
        return sum(1 for e in self._entries.values() if e.owner == owner)

    def __len__(self) -> int:
        return len(self._entries)
