"""
Timer scheduling for the single-threaded event loop.
"""

import heapq
import itertools
import time
from typing import Callable, Dict, List, Optional, Tuple


def epoch_ms() -> int:
    """Wall clock in milliseconds since epoch."""
    return int(time.time() * 1000)


class TkScheduler:
    """Schedules callbacks on a Tk root via ``after``."""

    def __init__(self, root):
        self.root = root

    def now_ms(self) -> int:
        return epoch_ms()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> str:
        return self.root.after(delay_ms, callback)

    def cancel(self, handle: Optional[str]):
        if handle is not None:
            self.root.after_cancel(handle)


class ManualScheduler:
    """
    Scheduler driven by an explicit clock.

    Time only moves when ``advance`` is called; due callbacks then run in
    order of their due time, one at a time.
    """

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._counter = itertools.count()
        self._queue: List[Tuple[int, int]] = []
        self._callbacks: Dict[int, Callable[[], None]] = {}

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._counter)
        self._callbacks[handle] = callback
        heapq.heappush(self._queue, (self._now + max(0, delay_ms), handle))
        return handle

    def cancel(self, handle: Optional[int]):
        self._callbacks.pop(handle, None)

    def pending(self) -> int:
        return len(self._callbacks)

    def advance(self, delta_ms: int):
        """Move the clock forward, running every callback that falls due."""
        target = self._now + delta_ms
        while self._queue and self._queue[0][0] <= target:
            due, handle = heapq.heappop(self._queue)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            self._now = due
            callback()
        self._now = target
