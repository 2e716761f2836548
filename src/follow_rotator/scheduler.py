"""Timer scheduling abstraction used by the rotation engine.

The engine never touches real timers directly. It receives a
:class:`Scheduler` and asks it for one-shot and repeating callbacks, which
lets tests drive the rotation with :class:`VirtualScheduler` by advancing
virtual time. The Qt-backed implementation lives in
:mod:`follow_rotator.overlay`.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple

Callback = Callable[[], None]


class Timer(Protocol):
    """Handle for a scheduled callback."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Source of one-shot and repeating timers, all in milliseconds."""

    def call_later(self, delay_ms: int, callback: Callback) -> Timer: ...

    def call_repeating(self, interval_ms: int, callback: Callback) -> Timer: ...


class VirtualTimer:
    """Timer owned by a :class:`VirtualScheduler`."""

    def __init__(
        self, due_ms: int, callback: Callback, interval_ms: Optional[int] = None
    ) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Deterministic scheduler that only moves when :meth:`advance` is called.

    Callbacks fire in order of due time; callbacks due at the same instant
    fire in the order they were scheduled. Timers scheduled from inside a
    callback fire during the same :meth:`advance` call if they fall due
    before its end.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms
        self._queue: List[Tuple[int, int, VirtualTimer]] = []
        self._sequence = itertools.count()

    @property
    def now_ms(self) -> int:
        return self._now_ms

    def call_later(self, delay_ms: int, callback: Callback) -> VirtualTimer:
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        timer = VirtualTimer(self._now_ms + delay_ms, callback)
        self._push(timer)
        return timer

    def call_repeating(self, interval_ms: int, callback: Callback) -> VirtualTimer:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        timer = VirtualTimer(self._now_ms + interval_ms, callback, interval_ms)
        self._push(timer)
        return timer

    def pending(self) -> int:
        """Number of timers that are still armed."""

        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, delta_ms: int) -> None:
        """Move virtual time forward, firing every callback that falls due."""

        if delta_ms < 0:
            raise ValueError("delta_ms must be non-negative")
        target = self._now_ms + delta_ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = due
            if timer.interval_ms is not None:
                timer.due_ms = due + timer.interval_ms
                self._push(timer)
            timer.callback()
        self._now_ms = target

    def _push(self, timer: VirtualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._sequence), timer))
