"""
Instant session simulation on a virtual clock.

Runs the real engine and driver end to end without waiting, recording
every phase the session passes through and the events emitted there.
"""

from __future__ import annotations

from .config import COMPLETION_DISPLAY_SECONDS, PREPARE_SECONDS
from .driver import SessionDriver
from .engine import SessionEngine, duration_of, step_label
from .events import EventKind, FeedbackEvent
from .models import SessionPlan, TimelineEntry
from .scheduler import Scheduler


def simulate_session(
    plan: SessionPlan,
    prepare_seconds: int = PREPARE_SECONDS,
    completion_delay: int = COMPLETION_DISPLAY_SECONDS,
) -> tuple[list[TimelineEntry], int]:
    """
    Run *plan* to completion on a VirtualClock.

    Returns:
        (timeline, completed_at) where completed_at is the virtual second at
        which the session-complete callback fired.
    """
    scheduler = Scheduler.virtual()
    clock = scheduler.clock
    engine = SessionEngine(plan, prepare_seconds=prepare_seconds)

    timeline: list[TimelineEntry] = []

    def record_phase() -> None:
        state = engine.state
        timeline.append(
            TimelineEntry(
                elapsed_seconds=int(clock.now),
                phase=state.phase,
                step_index=state.step_index,
                label=step_label(state, plan),
                duration_seconds=duration_of(state.phase, state.step_index, plan, prepare_seconds),
            )
        )

    def on_event(event: FeedbackEvent) -> None:
        if event.kind is EventKind.PHASE_START or event.kind is EventKind.COMPLETION:
            record_phase()
        timeline[-1].events.append(event.kind.value)

    completed_at: list[int] = []
    engine.bus.subscribe_all(on_event)
    record_phase()

    with SessionDriver(
        engine,
        scheduler,
        on_complete=lambda: completed_at.append(int(clock.now)),
        completion_delay=completion_delay,
    ) as driver:
        driver.start()
        scheduler.run()

    return timeline, completed_at[0] if completed_at else int(clock.now)
