"""Event-queue abstraction used to sequence UI work.

Every callback that touches the host goes through a :class:`Scheduler` so it
runs on the next tick of the host's event loop rather than inside a process
callback or a widget teardown.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class Scheduler(Protocol):
    def schedule(self, fn: Callable[[], None]) -> None:
        """Run *fn* on a later tick of the event loop."""
        ...


class LoopScheduler:
    """Schedules callbacks on an asyncio loop with ``call_soon``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, fn: Callable[[], None]) -> None:
        self.loop.call_soon(fn)
