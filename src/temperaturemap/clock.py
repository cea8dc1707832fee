"""Cancellable scheduled callbacks behind a small protocol.

The playback controller only sees ``Scheduler.call_later``. ``VirtualClock``
fires due callbacks when advanced: tests advance it by hand, the app pumps
it to wall-clock time from a periodically rerun fragment.
"""

import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class VirtualTimer:
    """Handle returned by VirtualClock.call_later."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self._callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._callback = None

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if self._callback is not None:
            callback, self._callback = self._callback, None
            callback()


class VirtualClock:
    """Manually advanced clock. Callbacks run synchronously inside advance().

    With a ``time_source``, ``pump()`` advances to the source's reading and
    new timers count their delay from that reading rather than from the last
    pump. A timer armed after an idle stretch is therefore not already overdue.
    """

    def __init__(
        self,
        start: float = 0.0,
        time_source: Callable[[], float] | None = None,
    ):
        self._now = start
        self._time_source = time_source
        self._queue: list[tuple[float, int, VirtualTimer]] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled())

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualTimer:
        timer = VirtualTimer(self._origin() + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    def _origin(self) -> float:
        if self._time_source is None:
            return self._now
        return max(self._now, self._time_source())

    def pump(self) -> int:
        """Advance to the time source's current reading."""
        if self._time_source is None:
            raise RuntimeError("pump() requires a clock built with a time_source")
        return self.advance_to(self._time_source())

    def advance(self, seconds: float) -> int:
        """Move time forward by seconds. Returns the number of callbacks fired."""
        return self.advance_to(self._now + seconds)

    def advance_to(self, when: float) -> int:
        """Fire every live callback due at or before ``when``, in due order.

        Callbacks scheduled while advancing run too if they fall due in range.
        A timer cancelled by an earlier callback in the same advance never fires.
        """
        fired = 0
        while self._queue and self._queue[0][0] <= when:
            due, _, timer = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if timer.cancelled():
                continue
            timer._run()
            fired += 1
        self._now = max(self._now, when)
        return fired
