"""
Countdown driver: connects a SessionEngine to a Scheduler.

The driver owns the only tick timer of a session. It is armed while the
engine is active and unpaused and cancelled the moment either stops
being true, so repeated start/pause cycles never stack timers. Leaving
the driver's context (or calling close()) cancels every handle it owns.
"""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from .config import COMPLETION_DISPLAY_SECONDS, TICK_INTERVAL_SECONDS
from .engine import SessionEngine
from .events import AudioOutput, EventKind, FeedbackEvent
from .scheduler import Scheduler, TimerHandle


class SessionDriver:
    """Drives one SessionEngine from a fixed-interval timer."""

    def __init__(
        self,
        engine: SessionEngine,
        scheduler: Scheduler,
        on_complete: Callable[[], None] | None = None,
        audio: AudioOutput | None = None,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        completion_delay: float = COMPLETION_DISPLAY_SECONDS,
    ):
        """
        Args:
            engine: Engine to drive
            scheduler: Timer queue the tick and completion callbacks run on
            on_complete: Called once, completion_delay time units after the session completes
            audio: Output context resumed before the session starts
            tick_interval: Seconds per time unit
            completion_delay: Time units the completion state is shown before on_complete
        """
        self.engine = engine
        self.scheduler = scheduler
        self.on_complete = on_complete
        self.audio = audio
        self.tick_interval = tick_interval
        self.completion_delay = completion_delay

        self._tick_timer: TimerHandle | None = None
        self._completion_timer: TimerHandle | None = None
        self._completion_signalled = False
        self._closed = False
        self._unsubscribe = engine.bus.subscribe(EventKind.COMPLETION, self._on_completion)

    def __enter__(self) -> "SessionDriver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def ticking(self) -> bool:
        """True while a tick timer is armed."""
        return self._tick_timer is not None and self._tick_timer.active

    @property
    def completion_pending(self) -> bool:
        return self._completion_timer is not None and self._completion_timer.active

    # -- control operations --------------------------------------------------

    def start(self) -> None:
        """Resume the audio output, then activate the engine."""
        if self._closed:
            return
        if self.audio is not None and not self.engine.is_active:
            try:
                self.audio.resume()
            except Exception:
                logger.exception("Audio output could not be resumed; continuing without it")
        self.engine.start()
        self._sync_timer()

    def pause(self) -> None:
        self.engine.pause()
        self._sync_timer()

    def resume(self) -> None:
        self.engine.resume()
        self._sync_timer()

    def toggle_pause(self) -> None:
        self.engine.toggle_pause()
        self._sync_timer()

    def skip(self) -> None:
        self.engine.skip()
        self._sync_timer()

    def stop(self) -> None:
        self.engine.stop()
        self._sync_timer()

    def close(self) -> None:
        """Cancel every timer this driver owns. Safe to call repeatedly."""
        self._closed = True
        self._cancel_tick()
        if self._completion_timer is not None:
            self._completion_timer.cancel()
            self._completion_timer = None
        self._unsubscribe()

    # -- internals -----------------------------------------------------------

    def _on_tick(self) -> None:
        self.engine.tick()
        self._sync_timer()

    def _sync_timer(self) -> None:
        should_tick = not self._closed and self.engine.state.is_running
        if should_tick and not self.ticking:
            self._tick_timer = self.scheduler.call_every(self.tick_interval, self._on_tick)
        elif not should_tick:
            self._cancel_tick()

    def _cancel_tick(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None

    def _on_completion(self, event: FeedbackEvent) -> None:
        self._cancel_tick()
        if self._completion_signalled or self._closed:
            return
        self._completion_signalled = True
        logger.info("Session complete")
        if self.on_complete is not None:
            self._completion_timer = self.scheduler.call_later(
                self.completion_delay * self.tick_interval, self._fire_on_complete
            )

    def _fire_on_complete(self) -> None:
        self._completion_timer = None
        if self.on_complete is not None:
            self.on_complete()
