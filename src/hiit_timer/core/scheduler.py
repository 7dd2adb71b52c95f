"""
Single-threaded timer scheduling on top of the standard library sched module.

The same Scheduler runs on the real monotonic clock for live sessions and
on a VirtualClock for tests and instant simulations. Every scheduled
callback is represented by a TimerHandle whose cancel() is idempotent;
once cancelled, the callback never fires.
"""

from __future__ import annotations

import sched
import time
from collections.abc import Callable
from contextlib import suppress


class VirtualClock:
    """Clock whose time only moves when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self.now += seconds


class TimerHandle:
    """A one-shot or repeating scheduled callback."""

    def __init__(
        self,
        scheduler: "Scheduler",
        delay: float,
        callback: Callable[[], None],
        interval: float | None = None,
    ):
        self._scheduler = scheduler
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._fired = False
        self._event = scheduler._queue.enter(delay, 0, self._fire)

    @property
    def active(self) -> bool:
        """True while the callback may still fire."""
        return not self._cancelled and not (self._fired and self._interval is None)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        # A one-shot event is no longer queued while its own callback is running.
        with suppress(ValueError):
            self._scheduler._queue.cancel(self._event)

    def _fire(self) -> None:
        if self._cancelled:
            return
        if self._interval is None:
            self._fired = True
            self._callback()
            return
        # Next deadline is anchored to this one; intervals missed while the
        # queue was not running are dropped, not replayed.
        due = self._event.time + self._interval
        now = self._scheduler.now()
        while due <= now:
            due += self._interval
        # Queued before the callback runs so an exception raised inside it
        # (KeyboardInterrupt included) cannot silently end the repetition.
        self._event = self._scheduler._queue.enterabs(due, 0, self._fire)
        self._callback()


class Scheduler:
    """
    Cooperative timer queue.

    Callbacks run on the thread that calls run() / advance(), one at a time.
    """

    def __init__(
        self,
        timefunc: Callable[[], float] = time.monotonic,
        delayfunc: Callable[[float], object] = time.sleep,
    ):
        self._timefunc = timefunc
        self._queue = sched.scheduler(timefunc, delayfunc)
        self.clock: VirtualClock | None = None

    @classmethod
    def virtual(cls, clock: VirtualClock | None = None) -> "Scheduler":
        """Scheduler driven by a VirtualClock (no real waiting)."""
        clock = clock if clock is not None else VirtualClock()
        scheduler = cls(clock.time, clock.sleep)
        scheduler.clock = clock
        return scheduler

    def now(self) -> float:
        return self._timefunc()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return TimerHandle(self, delay, callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """Call *callback* every *interval* seconds, first after one interval."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        return TimerHandle(self, interval, callback, interval=interval)

    @property
    def pending(self) -> int:
        """Number of callbacks currently queued."""
        return len(self._queue.queue)

    def empty(self) -> bool:
        return self._queue.empty()

    def run(self) -> None:
        """Block until the queue drains. KeyboardInterrupt leaves it intact."""
        self._queue.run()

    def advance(self, seconds: float) -> None:
        """
        Fire every callback due in the next *seconds* (VirtualClock only).

        Callbacks see the clock set to their own deadline.
        """
        clock = self.clock
        if clock is None:
            raise RuntimeError("advance() requires a scheduler built with Scheduler.virtual()")
        target = clock.now + seconds
        while True:
            queue = self._queue.queue
            if not queue or queue[0].time > target:
                break
            clock.now = max(clock.now, queue[0].time)
            self._queue.run(blocking=False)
        clock.now = target
