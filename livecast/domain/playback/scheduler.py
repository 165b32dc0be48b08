"""Clock and delayed-callback abstractions for the playback controller.

``AsyncioScheduler`` backs real playback with ``loop.call_later``;
``ManualScheduler`` paired with ``ManualClock`` fires callbacks only when time
is advanced explicitly.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Protocol

Clock = Callable[[], float]

monotonic_clock: Clock = time.monotonic


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler; ``advance`` moves the clock and runs due callbacks in order."""

    def __init__(self, clock: ManualClock | None = None):
        self.clock = clock or ManualClock()
        self._handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.clock() + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float) -> int:
        """Advance time and fire every callback now due. Returns how many fired."""
        target = self.clock() + seconds
        fired = 0
        while True:
            due = sorted((h for h in self.pending if h.due <= target), key=lambda h: h.due)
            if not due:
                break
            handle = due[0]
            self._handles.remove(handle)
            self.clock.now = max(self.clock.now, handle.due)
            handle.callback()
            fired += 1
        self.clock.now = target
        return fired
