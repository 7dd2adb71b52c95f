"""
Feedback events emitted by the session engine.

Presentation and audio code subscribe to an EventBus instead of being
called inline by the state machine. A failing subscriber is logged and
skipped; it never interrupts a transition.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from loguru import logger

from .models import Phase


class EventKind(str, Enum):
    COUNTDOWN_WARNING = "countdown_warning"
    PHASE_START = "phase_start"
    COMPLETION = "completion"
    PHASE_LABEL = "phase_label"


@dataclass(frozen=True)
class FeedbackEvent:
    """A point event describing what just happened in the session."""

    kind: EventKind
    phase: Phase
    step_index: int
    remaining_seconds: int
    label: str = ""


Handler = Callable[[FeedbackEvent], None]


class EventBus:
    """Synchronous publish/subscribe for FeedbackEvents."""

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Handler]] = {kind: [] for kind in EventKind}

    def subscribe(self, kind: EventKind, handler: Handler) -> Callable[[], None]:
        """
        Register *handler* for events of *kind*.

        Returns:
            A callable that removes the subscription.
        """
        self._handlers[kind].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[kind]:
                self._handlers[kind].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register *handler* for every event kind."""
        removers = [self.subscribe(kind, handler) for kind in EventKind]

        def unsubscribe() -> None:
            for remove in removers:
                remove()

        return unsubscribe

    def emit(self, event: FeedbackEvent) -> None:
        """Deliver *event* to every subscriber of its kind, in order."""
        for handler in list(self._handlers[event.kind]):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Feedback handler {handler!r} failed on {event.kind.value}")


# ---------------------------------------------------------------------------
# Audio capability
# ---------------------------------------------------------------------------


class Sound(str, Enum):
    COUNTDOWN = "countdown"
    START = "start"
    REST = "rest"
    COMPLETION = "completion"


class AudioOutput(Protocol):
    """Anything that can play the session's feedback sounds."""

    def play(self, sound: Sound) -> None: ...

    def resume(self) -> None: ...


class SilentAudio:
    """AudioOutput that plays nothing; records what it was asked to play."""

    def __init__(self) -> None:
        self.played: list[Sound] = []
        self.resumed = False

    def play(self, sound: Sound) -> None:
        self.played.append(sound)

    def resume(self) -> None:
        self.resumed = True


def sound_for(event: FeedbackEvent) -> Sound | None:
    """Map a feedback event to the sound it should trigger, if any."""
    if event.kind is EventKind.COUNTDOWN_WARNING:
        return Sound.COUNTDOWN
    if event.kind is EventKind.COMPLETION:
        return Sound.COMPLETION
    if event.kind is EventKind.PHASE_START:
        if event.phase is Phase.WORK:
            return Sound.START
        if event.phase is Phase.REST:
            return Sound.REST
    return None


def attach_audio(bus: EventBus, audio: AudioOutput) -> Callable[[], None]:
    """Subscribe *audio* to *bus*; returns the unsubscribe callable."""

    def on_event(event: FeedbackEvent) -> None:
        sound = sound_for(event)
        if sound is not None:
            audio.play(sound)

    return bus.subscribe_all(on_event)
